"""SQLite-backed persistence for users, tokens, saved stories, and share grants."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from uuid import uuid4

_STORY_COLUMNS = (
    "story_id, owner_id, title, content_json, grade, story_format, include_images, "
    "created_at_utc, updated_at_utc"
)


@dataclass(frozen=True)
class StoredUser:
    """Stored teacher account data."""

    user_id: str
    email: str
    display_name: str
    password_hash: str
    created_at_utc: str


@dataclass(frozen=True)
class StoredToken:
    """Stored bearer-token session."""

    token_id: str
    user_id: str
    token_value: str
    expires_at_utc: str
    created_at_utc: str


@dataclass(frozen=True)
class StoredStory:
    """Stored story with its rendered content serialized as JSON."""

    story_id: str
    owner_id: str
    title: str
    content_json: str
    grade: int
    story_format: str
    include_images: bool
    created_at_utc: str
    updated_at_utc: str


@dataclass(frozen=True)
class StoredShare:
    """One recipient grant for read-only access to a story."""

    share_id: str
    story_id: str
    recipient_email: str
    share_token: str
    created_at_utc: str


class SQLiteStoryStore:
    """Persist and query story platform records from one SQLite database."""

    def __init__(self, db_path: Path) -> None:
        self._db_path = db_path
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._initialize_schema()

    def _connect(self) -> sqlite3.Connection:
        connection = sqlite3.connect(str(self._db_path))
        connection.row_factory = sqlite3.Row
        return connection

    def _initialize_schema(self) -> None:
        with self._connect() as connection:
            connection.execute(
                """
                CREATE TABLE IF NOT EXISTS users (
                    user_id TEXT PRIMARY KEY,
                    email TEXT NOT NULL UNIQUE,
                    display_name TEXT NOT NULL,
                    password_hash TEXT NOT NULL,
                    created_at_utc TEXT NOT NULL
                )
                """
            )
            connection.execute(
                """
                CREATE TABLE IF NOT EXISTS access_tokens (
                    token_id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    token_value TEXT NOT NULL UNIQUE,
                    expires_at_utc TEXT NOT NULL,
                    created_at_utc TEXT NOT NULL,
                    FOREIGN KEY (user_id) REFERENCES users(user_id)
                )
                """
            )
            connection.execute(
                """
                CREATE TABLE IF NOT EXISTS stories (
                    story_id TEXT PRIMARY KEY,
                    owner_id TEXT NOT NULL,
                    title TEXT NOT NULL,
                    content_json TEXT NOT NULL,
                    grade INTEGER NOT NULL,
                    story_format TEXT NOT NULL,
                    include_images INTEGER NOT NULL,
                    created_at_utc TEXT NOT NULL,
                    updated_at_utc TEXT NOT NULL,
                    FOREIGN KEY (owner_id) REFERENCES users(user_id)
                )
                """
            )
            connection.execute(
                """
                CREATE TABLE IF NOT EXISTS story_shares (
                    share_id TEXT PRIMARY KEY,
                    story_id TEXT NOT NULL,
                    recipient_email TEXT NOT NULL,
                    share_token TEXT NOT NULL UNIQUE,
                    created_at_utc TEXT NOT NULL,
                    FOREIGN KEY (story_id) REFERENCES stories(story_id)
                )
                """
            )
            connection.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_stories_owner_created
                ON stories(owner_id, created_at_utc DESC)
                """
            )
            connection.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_tokens_user
                ON access_tokens(user_id, expires_at_utc DESC)
                """
            )
            connection.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_shares_story
                ON story_shares(story_id, created_at_utc)
                """
            )

    def create_user(
        self, *, email: str, display_name: str, password_hash: str
    ) -> StoredUser | None:
        """Create a user record; return None when email is already taken."""
        now = datetime.now(UTC).isoformat()
        user_id = uuid4().hex
        try:
            with self._connect() as connection:
                connection.execute(
                    """
                    INSERT INTO users (user_id, email, display_name, password_hash, created_at_utc)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (user_id, email.lower(), display_name, password_hash, now),
                )
        except sqlite3.IntegrityError:
            return None
        return self.get_user_by_id(user_id=user_id)

    def get_user_by_email(self, *, email: str) -> StoredUser | None:
        """Load one user by normalized email."""
        with self._connect() as connection:
            row = connection.execute(
                """
                SELECT user_id, email, display_name, password_hash, created_at_utc
                FROM users
                WHERE email = ?
                """,
                (email.lower(),),
            ).fetchone()
        if row is None:
            return None
        return self._user_from_row(row)

    def get_user_by_id(self, *, user_id: str) -> StoredUser | None:
        with self._connect() as connection:
            row = connection.execute(
                """
                SELECT user_id, email, display_name, password_hash, created_at_utc
                FROM users
                WHERE user_id = ?
                """,
                (user_id,),
            ).fetchone()
        if row is None:
            return None
        return self._user_from_row(row)

    def create_token(self, *, user_id: str, token_value: str, expires_at_utc: str) -> StoredToken:
        token_id = uuid4().hex
        now = datetime.now(UTC).isoformat()
        with self._connect() as connection:
            connection.execute(
                """
                INSERT INTO access_tokens (token_id, user_id, token_value, expires_at_utc, created_at_utc)
                VALUES (?, ?, ?, ?, ?)
                """,
                (token_id, user_id, token_value, expires_at_utc, now),
            )
        return StoredToken(
            token_id=token_id,
            user_id=user_id,
            token_value=token_value,
            expires_at_utc=expires_at_utc,
            created_at_utc=now,
        )

    def get_user_by_token(self, *, token_value: str, now_utc: str) -> StoredUser | None:
        """Resolve a bearer token into a user if it is still valid."""
        with self._connect() as connection:
            row = connection.execute(
                """
                SELECT u.user_id, u.email, u.display_name, u.password_hash, u.created_at_utc
                FROM access_tokens t
                JOIN users u ON u.user_id = t.user_id
                WHERE t.token_value = ? AND t.expires_at_utc > ?
                """,
                (token_value, now_utc),
            ).fetchone()
        if row is None:
            return None
        return self._user_from_row(row)

    def list_stories(self, *, owner_id: str, limit: int = 100) -> list[StoredStory]:
        """Return one owner's stories, newest first."""
        with self._connect() as connection:
            rows = connection.execute(
                f"""
                SELECT {_STORY_COLUMNS}
                FROM stories
                WHERE owner_id = ?
                ORDER BY created_at_utc DESC
                LIMIT ?
                """,
                (owner_id, limit),
            ).fetchall()
        return [self._story_from_row(row) for row in rows]

    def create_story(
        self,
        *,
        owner_id: str,
        title: str,
        content_json: str,
        grade: int,
        story_format: str,
        include_images: bool,
    ) -> StoredStory:
        now = datetime.now(UTC).isoformat()
        story_id = uuid4().hex
        with self._connect() as connection:
            connection.execute(
                f"""
                INSERT INTO stories ({_STORY_COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    story_id,
                    owner_id,
                    title,
                    content_json,
                    grade,
                    story_format,
                    int(include_images),
                    now,
                    now,
                ),
            )
        story = self.get_story(story_id=story_id)
        if story is None:
            raise RuntimeError("Created story could not be loaded.")
        return story

    def get_story(self, *, story_id: str) -> StoredStory | None:
        with self._connect() as connection:
            row = connection.execute(
                f"""
                SELECT {_STORY_COLUMNS}
                FROM stories
                WHERE story_id = ?
                """,
                (story_id,),
            ).fetchone()
        if row is None:
            return None
        return self._story_from_row(row)

    def update_story(
        self,
        *,
        story_id: str,
        title: str,
        content_json: str,
        grade: int,
        story_format: str,
        include_images: bool,
    ) -> StoredStory | None:
        """Update editable fields and return the new stored value."""
        now = datetime.now(UTC).isoformat()
        with self._connect() as connection:
            cursor = connection.execute(
                """
                UPDATE stories
                SET title = ?, content_json = ?, grade = ?, story_format = ?,
                    include_images = ?, updated_at_utc = ?
                WHERE story_id = ?
                """,
                (title, content_json, grade, story_format, int(include_images), now, story_id),
            )
            updated_rows = cursor.rowcount
        if updated_rows == 0:
            return None
        return self.get_story(story_id=story_id)

    def delete_story(self, *, story_id: str) -> bool:
        """Delete a story and its share grants; return False when it did not exist."""
        with self._connect() as connection:
            connection.execute("DELETE FROM story_shares WHERE story_id = ?", (story_id,))
            cursor = connection.execute("DELETE FROM stories WHERE story_id = ?", (story_id,))
            deleted_rows = cursor.rowcount
        return deleted_rows > 0

    def share_story(self, *, story_id: str, recipient_email: str, share_token: str) -> StoredShare:
        """Record one recipient grant with its own access token."""
        share_id = uuid4().hex
        now = datetime.now(UTC).isoformat()
        with self._connect() as connection:
            connection.execute(
                """
                INSERT INTO story_shares (share_id, story_id, recipient_email, share_token, created_at_utc)
                VALUES (?, ?, ?, ?, ?)
                """,
                (share_id, story_id, recipient_email.lower(), share_token, now),
            )
        return StoredShare(
            share_id=share_id,
            story_id=story_id,
            recipient_email=recipient_email.lower(),
            share_token=share_token,
            created_at_utc=now,
        )

    def list_share_recipients(self, *, story_id: str) -> list[str]:
        """Return distinct recipient emails in the order they were first shared."""
        with self._connect() as connection:
            rows = connection.execute(
                """
                SELECT recipient_email, MIN(created_at_utc) AS first_shared
                FROM story_shares
                WHERE story_id = ?
                GROUP BY recipient_email
                ORDER BY first_shared ASC
                """,
                (story_id,),
            ).fetchall()
        return [str(row["recipient_email"]) for row in rows]

    def get_shared_story(self, *, story_id: str, share_token: str) -> StoredStory | None:
        """Load a story only when the share token was issued for it."""
        with self._connect() as connection:
            row = connection.execute(
                """
                SELECT s.story_id, s.owner_id, s.title, s.content_json, s.grade, s.story_format,
                       s.include_images, s.created_at_utc, s.updated_at_utc
                FROM story_shares g
                JOIN stories s ON s.story_id = g.story_id
                WHERE g.story_id = ? AND g.share_token = ?
                """,
                (story_id, share_token),
            ).fetchone()
        if row is None:
            return None
        return self._story_from_row(row)

    @staticmethod
    def _user_from_row(row: sqlite3.Row) -> StoredUser:
        return StoredUser(
            user_id=str(row["user_id"]),
            email=str(row["email"]),
            display_name=str(row["display_name"]),
            password_hash=str(row["password_hash"]),
            created_at_utc=str(row["created_at_utc"]),
        )

    @staticmethod
    def _story_from_row(row: sqlite3.Row) -> StoredStory:
        return StoredStory(
            story_id=str(row["story_id"]),
            owner_id=str(row["owner_id"]),
            title=str(row["title"]),
            content_json=str(row["content_json"]),
            grade=int(row["grade"]),
            story_format=str(row["story_format"]),
            include_images=bool(row["include_images"]),
            created_at_utc=str(row["created_at_utc"]),
            updated_at_utc=str(row["updated_at_utc"]),
        )
