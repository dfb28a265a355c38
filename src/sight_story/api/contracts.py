"""Typed contracts shared by API handlers and the CLI."""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from sight_story.core.story_composer import DEFAULT_PROTAGONIST, ComposedStory

WORD_PATTERN = re.compile(r"^[a-z][a-z'-]{0,39}$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MAX_TARGET_WORDS = 100

StoryFormat = Literal["highlighted", "bold", "underlined", "normal"]


class ContractModel(BaseModel):
    """Base model config used by all API contracts."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


def _normalize_words(values: Iterable[str]) -> list[str]:
    normalized: list[str] = []
    for value in values:
        word = value.strip().lower()
        if not word:
            continue
        if not WORD_PATTERN.match(word):
            raise ValueError(f"Word `{value}` must match `{WORD_PATTERN.pattern}`.")
        normalized.append(word)
    return normalized


def _non_blank_sentences(values: Iterable[str]) -> list[str]:
    sentences = [value.strip() for value in values if value.strip()]
    if not sentences:
        raise ValueError("Story must include at least one sentence.")
    return sentences


def _validate_email_value(value: str) -> str:
    normalized = value.strip().lower()
    if not EMAIL_PATTERN.match(normalized):
        raise ValueError("Email must be a valid address.")
    return normalized


class ComposeRequest(ContractModel):
    """Target words and protagonist for one composition."""

    words: list[str] = Field(default_factory=list, max_length=MAX_TARGET_WORDS)
    protagonist_name: str = Field(default=DEFAULT_PROTAGONIST, min_length=1, max_length=60)
    seed: int | None = None

    @field_validator("words")
    @classmethod
    def _validate_words(cls, values: list[str]) -> list[str]:
        return _normalize_words(values)


class ComposedStoryResponse(ContractModel):
    """Composition result without persistence metadata."""

    title: str
    sentences: list[str]
    used_words: list[str]
    total_target_words: int
    coverage_percent: int = Field(ge=0, le=100)
    scenes_used: list[str]
    uncovered_words: list[str]

    @classmethod
    def from_story(cls, story: ComposedStory) -> ComposedStoryResponse:
        return cls(
            title=story.title,
            sentences=list(story.sentences),
            used_words=list(story.used_words),
            total_target_words=story.total_target_words,
            coverage_percent=story.coverage_percent,
            scenes_used=list(story.scenes_used),
            uncovered_words=list(story.uncovered_words),
        )


class StoryContent(ContractModel):
    """Rendered story body persisted as JSON alongside the story row."""

    sentences: list[str] = Field(min_length=1)
    words: list[str] = Field(default_factory=list)
    used_words: list[str] = Field(default_factory=list)
    scenes_used: list[str] = Field(default_factory=list)
    coverage_percent: int = Field(default=0, ge=0, le=100)
    protagonist_name: str = DEFAULT_PROTAGONIST


class StoryCreateRequest(ComposeRequest):
    """Compose a story and save it for the authenticated teacher.

    When `sentences` is given the edited text is saved as-is instead of composing.
    """

    title: str | None = Field(default=None, min_length=1, max_length=300)
    sentences: list[str] | None = Field(default=None, min_length=1, max_length=200)
    grade: int = Field(default=1, ge=0, le=5)
    story_format: StoryFormat = "highlighted"
    include_images: bool = True

    @field_validator("sentences")
    @classmethod
    def _drop_blank_sentences(cls, values: list[str] | None) -> list[str] | None:
        if values is None:
            return None
        return _non_blank_sentences(values)


class StoryUpdateRequest(ContractModel):
    """Replace the editable parts of a saved story."""

    title: str = Field(min_length=1, max_length=300)
    sentences: list[str] = Field(min_length=1, max_length=200)
    words: list[str] = Field(default_factory=list, max_length=MAX_TARGET_WORDS)
    grade: int = Field(default=1, ge=0, le=5)
    story_format: StoryFormat = "highlighted"
    include_images: bool = True
    normalize_grammar: bool = True

    @field_validator("words")
    @classmethod
    def _validate_words(cls, values: list[str]) -> list[str]:
        return _normalize_words(values)

    @field_validator("sentences")
    @classmethod
    def _drop_blank_sentences(cls, values: list[str]) -> list[str]:
        return _non_blank_sentences(values)


class StoryResponse(ContractModel):
    """Saved story payload returned to its owner."""

    story_id: str
    owner_id: str
    title: str
    sentences: list[str]
    words: list[str]
    used_words: list[str]
    scenes_used: list[str]
    coverage_percent: int
    protagonist_name: str
    grade: int
    story_format: StoryFormat
    include_images: bool
    shared_with: list[str]
    created_at_utc: str
    updated_at_utc: str


class StoryShareRequest(ContractModel):
    """Share one story with a recipient email."""

    email: str = Field(min_length=5, max_length=320)
    message: str | None = Field(default=None, max_length=1000)

    @field_validator("email")
    @classmethod
    def _validate_email(cls, value: str) -> str:
        return _validate_email_value(value)


class StoryShareResponse(ContractModel):
    """Share link minted for one recipient."""

    story_id: str
    recipient_email: str
    share_url: str
    shared_with: list[str]


class SharedStoryResponse(ContractModel):
    """Read-only story view for share-link recipients."""

    story_id: str
    title: str
    sentences: list[str]
    words: list[str]
    grade: int
    story_format: StoryFormat
    include_images: bool
    created_at_utc: str


class WordTrackRequest(ContractModel):
    """Record one batch of words used at a grade level."""

    words: list[str] = Field(min_length=1, max_length=MAX_TARGET_WORDS)
    grade: int = Field(ge=0, le=5)

    @field_validator("words")
    @classmethod
    def _validate_words(cls, values: list[str]) -> list[str]:
        normalized = _normalize_words(values)
        if not normalized:
            raise ValueError("Words array must include at least one word.")
        return normalized


class WordTrackResponse(ContractModel):
    success: bool = True
    count: int


class WordUsageResponse(ContractModel):
    word: str
    total_count: int
    last_used_utc: str


class GradeTotalResponse(ContractModel):
    grade: int
    total: int


class WordAnalyticsResponse(ContractModel):
    """Most used words and summed usage per grade."""

    top_words: list[WordUsageResponse]
    grade_totals: list[GradeTotalResponse]


class SuggestedWordsResponse(ContractModel):
    grade: int
    suggested_words: list[str]


class AuthRegisterRequest(ContractModel):
    """Register a teacher account."""

    email: str = Field(min_length=5, max_length=320)
    password: SecretStr = Field(min_length=8, max_length=200)
    display_name: str = Field(min_length=1, max_length=120)

    @field_validator("email")
    @classmethod
    def _validate_email(cls, value: str) -> str:
        return _validate_email_value(value)

    @field_validator("password")
    @classmethod
    def _validate_password(cls, value: SecretStr) -> SecretStr:
        raw = value.get_secret_value()
        if raw.strip() != raw:
            raise ValueError("Password must not start or end with whitespace.")
        if not any(char.isalpha() for char in raw) or not any(char.isdigit() for char in raw):
            raise ValueError("Password must include at least one letter and one number.")
        return value


class AuthLoginRequest(ContractModel):
    """Authenticate and request an access token."""

    email: str = Field(min_length=5, max_length=320)
    password: SecretStr = Field(min_length=8, max_length=200)

    @field_validator("email")
    @classmethod
    def _validate_email(cls, value: str) -> str:
        return _validate_email_value(value)


class AuthTokenResponse(ContractModel):
    """Bearer token payload used by web clients."""

    access_token: str
    token_type: str = Field(default="bearer", pattern=r"^bearer$")
    expires_at_utc: str


class UserResponse(ContractModel):
    """Public user profile returned from authenticated endpoints."""

    user_id: str
    email: str
    display_name: str
    created_at_utc: str
