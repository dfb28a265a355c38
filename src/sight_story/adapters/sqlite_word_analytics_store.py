"""SQLite counters for sight-word usage across saved stories."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from sight_story.core.word_suggestions import GRADE_RANGE


@dataclass(frozen=True)
class WordUsage:
    """Aggregate usage for one word."""

    word: str
    total_count: int
    last_used_utc: str


class SQLiteWordAnalyticsStore:
    """Per-word totals plus per-grade counts, updated on every tracked story."""

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
                CREATE TABLE IF NOT EXISTS word_usage (
                    word TEXT PRIMARY KEY,
                    total_count INTEGER NOT NULL,
                    last_used_utc TEXT NOT NULL
                )
                """
            )
            connection.execute(
                """
                CREATE TABLE IF NOT EXISTS word_grade_usage (
                    word TEXT NOT NULL,
                    grade INTEGER NOT NULL,
                    use_count INTEGER NOT NULL,
                    PRIMARY KEY (word, grade)
                )
                """
            )
            connection.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_word_usage_total
                ON word_usage(total_count DESC)
                """
            )

    def track_words(self, *, words: Iterable[str], grade: int) -> int:
        """Increment counters for each word; return how many rows were touched."""
        now = datetime.now(UTC).isoformat()
        normalized = [word.strip().lower() for word in words if word.strip()]
        with self._connect() as connection:
            for word in normalized:
                connection.execute(
                    """
                    INSERT INTO word_usage (word, total_count, last_used_utc)
                    VALUES (?, 1, ?)
                    ON CONFLICT(word) DO UPDATE SET
                        total_count = total_count + 1,
                        last_used_utc = excluded.last_used_utc
                    """,
                    (word, now),
                )
                connection.execute(
                    """
                    INSERT INTO word_grade_usage (word, grade, use_count)
                    VALUES (?, ?, 1)
                    ON CONFLICT(word, grade) DO UPDATE SET use_count = use_count + 1
                    """,
                    (word, grade),
                )
        return len(normalized)

    def top_words(self, *, limit: int = 8) -> list[WordUsage]:
        with self._connect() as connection:
            rows = connection.execute(
                """
                SELECT word, total_count, last_used_utc
                FROM word_usage
                ORDER BY total_count DESC, word ASC
                LIMIT ?
                """,
                (limit,),
            ).fetchall()
        return [
            WordUsage(
                word=str(row["word"]),
                total_count=int(row["total_count"]),
                last_used_utc=str(row["last_used_utc"]),
            )
            for row in rows
        ]

    def grade_totals(self) -> dict[int, int]:
        """Return summed usage per grade, with zero for grades never tracked."""
        totals = {grade: 0 for grade in GRADE_RANGE}
        with self._connect() as connection:
            rows = connection.execute(
                """
                SELECT grade, SUM(use_count) AS total
                FROM word_grade_usage
                GROUP BY grade
                """
            ).fetchall()
        for row in rows:
            totals[int(row["grade"])] = int(row["total"])
        return totals

    def popular_words_for_grade(self, *, grade: int, limit: int = 10) -> list[str]:
        with self._connect() as connection:
            rows = connection.execute(
                """
                SELECT word
                FROM word_grade_usage
                WHERE grade = ? AND use_count > 0
                ORDER BY use_count DESC, word ASC
                LIMIT ?
                """,
                (grade, limit),
            ).fetchall()
        return [str(row["word"]) for row in rows]
