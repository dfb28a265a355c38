"""Public API surface for HTTP serving."""

from sight_story.api.app import create_app
from sight_story.api.contracts import ComposedStoryResponse, ComposeRequest, StoryContent

__all__ = [
    "ComposeRequest",
    "ComposedStoryResponse",
    "StoryContent",
    "create_app",
]
