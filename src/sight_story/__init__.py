"""Sight-word story composer: scene library, grammar passes, HTTP API, and CLIs."""
