"""FastAPI application for composing, saving, and sharing sight-word stories."""

from __future__ import annotations

import hashlib
import hmac
import logging
import random
import secrets
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Literal

from fastapi import Depends, FastAPI, HTTPException, Query, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, Field

from sight_story.adapters.sqlite_story_store import SQLiteStoryStore, StoredStory, StoredUser
from sight_story.adapters.sqlite_word_analytics_store import SQLiteWordAnalyticsStore
from sight_story.api.contracts import (
    AuthLoginRequest,
    AuthRegisterRequest,
    AuthTokenResponse,
    ComposedStoryResponse,
    ComposeRequest,
    GradeTotalResponse,
    SharedStoryResponse,
    StoryContent,
    StoryCreateRequest,
    StoryResponse,
    StoryShareRequest,
    StoryShareResponse,
    StoryUpdateRequest,
    SuggestedWordsResponse,
    UserResponse,
    WordAnalyticsResponse,
    WordTrackRequest,
    WordTrackResponse,
    WordUsageResponse,
)
from sight_story.config import cors_origins, public_base_url, resolve_db_path, token_ttl_hours
from sight_story.core.grammar import correct_story_grammar
from sight_story.core.story_composer import (
    ComposedStory,
    choose_title,
    compose_story,
    measure_coverage,
)
from sight_story.core.word_suggestions import is_valid_grade, suggest_words

PBKDF2_ITERATIONS = 310_000

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Simple health payload used by probes."""

    status: Literal["ok"] = "ok"
    service: str = "sight_story"


class ApiRootResponse(BaseModel):
    """Describes currently available API capabilities."""

    name: str = "sight_story"
    persistence: Literal["sqlite"] = "sqlite"
    auth: Literal["bearer-token"] = "bearer-token"
    endpoints: list[str] = Field(
        default_factory=lambda: [
            "/healthz",
            "/api/v1",
            "/api/v1/auth/register",
            "/api/v1/auth/login",
            "/api/v1/me",
            "/api/v1/compose",
            "/api/v1/stories",
            "/api/v1/stories/{story_id}",
            "/api/v1/stories/{story_id}/share",
            "/api/v1/shared-stories/{story_id}",
            "/api/v1/analytics/words",
            "/api/v1/analytics/suggested-words",
        ]
    )


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _hash_password(password: str) -> str:
    salt = secrets.token_bytes(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, PBKDF2_ITERATIONS)
    return f"pbkdf2_sha256${PBKDF2_ITERATIONS}${salt.hex()}${digest.hex()}"


def _verify_password(password: str, password_hash: str) -> bool:
    try:
        algorithm, iterations, salt_hex, digest_hex = password_hash.split("$", maxsplit=3)
    except ValueError:
        return False
    if algorithm != "pbkdf2_sha256":
        return False
    recomputed = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        bytes.fromhex(salt_hex),
        int(iterations),
    )
    return hmac.compare_digest(recomputed.hex(), digest_hex)


def _user_response(user: StoredUser) -> UserResponse:
    return UserResponse(
        user_id=user.user_id,
        email=user.email,
        display_name=user.display_name,
        created_at_utc=user.created_at_utc,
    )


def _compose(payload: ComposeRequest) -> ComposedStory:
    rng = random.Random(payload.seed) if payload.seed is not None else None
    return compose_story(payload.words, payload.protagonist_name, rng=rng)


def create_app(db_path: Path | None = None) -> FastAPI:
    """Create the API application."""
    effective_db_path = resolve_db_path(db_path)
    store = SQLiteStoryStore(db_path=effective_db_path)
    analytics_store = SQLiteWordAnalyticsStore(db_path=effective_db_path)
    bearer = HTTPBearer(auto_error=False)

    app = FastAPI(
        title="sight_story API",
        version="0.1.0",
        description=(
            "Compose sight-word stories for early readers, save them per teacher, "
            "share read-only links, and track word usage."
        ),
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        openapi_tags=[
            {"name": "system", "description": "Service health and runtime metadata."},
            {"name": "api", "description": "API discovery and root-level capability listing."},
            {"name": "auth", "description": "Registration, login, and profile lookups."},
            {"name": "compose", "description": "Stateless story composition."},
            {"name": "stories", "description": "Saved story CRUD scoped to the owner."},
            {"name": "sharing", "description": "Share grants and public read links."},
            {"name": "analytics", "description": "Word usage tracking and suggestions."},
        ],
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    logger.info("api.start db_path=%s", effective_db_path)

    def story_response(story: StoredStory) -> StoryResponse:
        content = StoryContent.model_validate_json(story.content_json)
        return StoryResponse(
            story_id=story.story_id,
            owner_id=story.owner_id,
            title=story.title,
            sentences=content.sentences,
            words=content.words,
            used_words=content.used_words,
            scenes_used=content.scenes_used,
            coverage_percent=content.coverage_percent,
            protagonist_name=content.protagonist_name,
            grade=story.grade,
            story_format=story.story_format,
            include_images=story.include_images,
            shared_with=store.list_share_recipients(story_id=story.story_id),
            created_at_utc=story.created_at_utc,
            updated_at_utc=story.updated_at_utc,
        )

    def owned_story_or_404(*, story_id: str, user: StoredUser) -> StoredStory:
        story = store.get_story(story_id=story_id)
        if story is None or story.owner_id != user.user_id:
            raise HTTPException(status_code=404, detail="Story not found")
        return story

    def current_user(
        credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
    ) -> StoredUser:
        if credentials is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Missing bearer token",
            )
        user = store.get_user_by_token(
            token_value=credentials.credentials, now_utc=_utc_now().isoformat()
        )
        if user is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid or expired token",
            )
        return user

    @app.get("/healthz", response_model=HealthResponse, tags=["system"])
    def healthz() -> HealthResponse:
        return HealthResponse()

    @app.get("/api/v1", response_model=ApiRootResponse, tags=["api"])
    def api_v1_root() -> ApiRootResponse:
        return ApiRootResponse()

    @app.post("/api/v1/auth/register", response_model=UserResponse, tags=["auth"], status_code=201)
    def register(payload: AuthRegisterRequest) -> UserResponse:
        created = store.create_user(
            email=payload.email,
            display_name=payload.display_name.strip(),
            password_hash=_hash_password(payload.password.get_secret_value()),
        )
        if created is None:
            raise HTTPException(status_code=409, detail="Email already registered")
        return _user_response(created)

    @app.post("/api/v1/auth/login", response_model=AuthTokenResponse, tags=["auth"])
    def login(payload: AuthLoginRequest) -> AuthTokenResponse:
        user = store.get_user_by_email(email=payload.email)
        if user is None or not _verify_password(
            payload.password.get_secret_value(), user.password_hash
        ):
            raise HTTPException(status_code=401, detail="Invalid credentials")
        expires_at = _utc_now() + timedelta(hours=token_ttl_hours())
        token = store.create_token(
            user_id=user.user_id,
            token_value=secrets.token_urlsafe(32),
            expires_at_utc=expires_at.isoformat(),
        )
        return AuthTokenResponse(
            access_token=token.token_value, expires_at_utc=token.expires_at_utc
        )

    @app.get("/api/v1/me", response_model=UserResponse, tags=["auth"])
    def me(user: StoredUser = Depends(current_user)) -> UserResponse:
        return _user_response(user)

    @app.post("/api/v1/compose", response_model=ComposedStoryResponse, tags=["compose"])
    def compose(
        payload: ComposeRequest,
        user: StoredUser = Depends(current_user),
    ) -> ComposedStoryResponse:
        composed = _compose(payload)
        logger.info(
            "story.compose.request user_id=%s words=%s coverage=%s",
            user.user_id,
            composed.total_target_words,
            composed.coverage_percent,
        )
        return ComposedStoryResponse.from_story(composed)

    @app.get("/api/v1/stories", response_model=list[StoryResponse], tags=["stories"])
    def list_stories(
        limit: int = Query(default=100, ge=1, le=500),
        user: StoredUser = Depends(current_user),
    ) -> list[StoryResponse]:
        return [
            story_response(story)
            for story in store.list_stories(owner_id=user.user_id, limit=limit)
        ]

    @app.post("/api/v1/stories", response_model=StoryResponse, tags=["stories"], status_code=201)
    def create_story(
        payload: StoryCreateRequest,
        user: StoredUser = Depends(current_user),
    ) -> StoryResponse:
        if payload.sentences is None:
            composed = _compose(payload)
            title = payload.title or composed.title
            content = StoryContent(
                sentences=list(composed.sentences),
                words=payload.words,
                used_words=list(composed.used_words),
                scenes_used=list(composed.scenes_used),
                coverage_percent=composed.coverage_percent,
                protagonist_name=payload.protagonist_name,
            )
        else:
            used_words, coverage_percent = measure_coverage(payload.sentences, payload.words)
            title = payload.title or choose_title([])
            content = StoryContent(
                sentences=payload.sentences,
                words=payload.words,
                used_words=used_words,
                coverage_percent=coverage_percent,
                protagonist_name=payload.protagonist_name,
            )
        story = store.create_story(
            owner_id=user.user_id,
            title=title,
            content_json=content.model_dump_json(),
            grade=payload.grade,
            story_format=payload.story_format,
            include_images=payload.include_images,
        )
        if payload.words:
            analytics_store.track_words(words=payload.words, grade=payload.grade)
        logger.info(
            "story.saved story_id=%s owner_id=%s coverage=%s",
            story.story_id,
            user.user_id,
            content.coverage_percent,
        )
        return story_response(story)

    @app.get("/api/v1/stories/{story_id}", response_model=StoryResponse, tags=["stories"])
    def get_story(story_id: str, user: StoredUser = Depends(current_user)) -> StoryResponse:
        return story_response(owned_story_or_404(story_id=story_id, user=user))

    @app.put("/api/v1/stories/{story_id}", response_model=StoryResponse, tags=["stories"])
    def update_story(
        story_id: str,
        payload: StoryUpdateRequest,
        user: StoredUser = Depends(current_user),
    ) -> StoryResponse:
        existing = owned_story_or_404(story_id=story_id, user=user)
        previous = StoryContent.model_validate_json(existing.content_json)
        sentences = (
            correct_story_grammar(payload.sentences)
            if payload.normalize_grammar
            else payload.sentences
        )
        words = payload.words or previous.words
        used_words, coverage_percent = measure_coverage(sentences, words)
        content = StoryContent(
            sentences=sentences,
            words=words,
            used_words=used_words,
            scenes_used=previous.scenes_used,
            coverage_percent=coverage_percent,
            protagonist_name=previous.protagonist_name,
        )
        story = store.update_story(
            story_id=story_id,
            title=payload.title.strip(),
            content_json=content.model_dump_json(),
            grade=payload.grade,
            story_format=payload.story_format,
            include_images=payload.include_images,
        )
        if story is None:
            raise HTTPException(status_code=404, detail="Story not found")
        return story_response(story)

    @app.delete("/api/v1/stories/{story_id}", status_code=204, tags=["stories"])
    def delete_story(story_id: str, user: StoredUser = Depends(current_user)) -> None:
        owned_story_or_404(story_id=story_id, user=user)
        if not store.delete_story(story_id=story_id):
            raise HTTPException(status_code=404, detail="Story not found")
        logger.info("story.deleted story_id=%s owner_id=%s", story_id, user.user_id)

    @app.post(
        "/api/v1/stories/{story_id}/share",
        response_model=StoryShareResponse,
        tags=["stories", "sharing"],
    )
    def share_story(
        story_id: str,
        payload: StoryShareRequest,
        user: StoredUser = Depends(current_user),
    ) -> StoryShareResponse:
        story = owned_story_or_404(story_id=story_id, user=user)
        share = store.share_story(
            story_id=story.story_id,
            recipient_email=payload.email,
            share_token=secrets.token_urlsafe(24),
        )
        share_url = (
            f"{public_base_url()}/api/v1/shared-stories/{story.story_id}?token={share.share_token}"
        )
        logger.info(
            "story.shared story_id=%s owner_id=%s share_id=%s has_message=%s",
            story.story_id,
            user.user_id,
            share.share_id,
            payload.message is not None,
        )
        return StoryShareResponse(
            story_id=story.story_id,
            recipient_email=share.recipient_email,
            share_url=share_url,
            shared_with=store.list_share_recipients(story_id=story.story_id),
        )

    @app.get(
        "/api/v1/shared-stories/{story_id}",
        response_model=SharedStoryResponse,
        tags=["sharing"],
    )
    def get_shared_story(
        story_id: str,
        token: str = Query(min_length=1, max_length=200),
    ) -> SharedStoryResponse:
        if store.get_story(story_id=story_id) is None:
            raise HTTPException(status_code=404, detail="Story not found")
        story = store.get_shared_story(story_id=story_id, share_token=token)
        if story is None:
            raise HTTPException(status_code=401, detail="Invalid access token")
        content = StoryContent.model_validate_json(story.content_json)
        return SharedStoryResponse(
            story_id=story.story_id,
            title=story.title,
            sentences=content.sentences,
            words=content.words,
            grade=story.grade,
            story_format=story.story_format,
            include_images=story.include_images,
            created_at_utc=story.created_at_utc,
        )

    @app.post("/api/v1/analytics/words", response_model=WordTrackResponse, tags=["analytics"])
    def track_words(
        payload: WordTrackRequest,
        user: StoredUser = Depends(current_user),
    ) -> WordTrackResponse:
        count = analytics_store.track_words(words=payload.words, grade=payload.grade)
        logger.info("analytics.track user_id=%s words=%s grade=%s", user.user_id, count, payload.grade)
        return WordTrackResponse(count=count)

    @app.get("/api/v1/analytics/words", response_model=WordAnalyticsResponse, tags=["analytics"])
    def word_usage(
        limit: int = Query(default=8, ge=1, le=100),
        user: StoredUser = Depends(current_user),
    ) -> WordAnalyticsResponse:
        return WordAnalyticsResponse(
            top_words=[
                WordUsageResponse(
                    word=usage.word,
                    total_count=usage.total_count,
                    last_used_utc=usage.last_used_utc,
                )
                for usage in analytics_store.top_words(limit=limit)
            ],
            grade_totals=[
                GradeTotalResponse(grade=grade, total=total)
                for grade, total in sorted(analytics_store.grade_totals().items())
            ],
        )

    @app.get(
        "/api/v1/analytics/suggested-words",
        response_model=SuggestedWordsResponse,
        tags=["analytics"],
    )
    def suggested_words(
        grade: int = Query(default=1),
        user: StoredUser = Depends(current_user),
    ) -> SuggestedWordsResponse:
        if not is_valid_grade(grade):
            raise HTTPException(status_code=400, detail="Invalid grade level")
        popular = analytics_store.popular_words_for_grade(grade=grade)
        return SuggestedWordsResponse(grade=grade, suggested_words=suggest_words(grade, popular))

    return app


app = create_app()
