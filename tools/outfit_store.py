"""Saved outfit storage abstractions and SQLite implementation."""
from __future__ import annotations

import asyncio
import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional
from uuid import uuid4

from models.errors import TransportError, ValidationError
from models.outfit import SavedOutfitRecord
from models.weather import WeatherSnapshot


def validate_save_request(user_id: Optional[str], city: Optional[str], weather: Optional[WeatherSnapshot]) -> None:
    """Reject saves that lack an owner, a city or weather data."""

    if not user_id:
        raise ValidationError("User ID is required")
    if not city:
        raise ValidationError("City is required")
    if weather is None:
        raise ValidationError("Weather data is required")


class OutfitStore:
    """Persistence interface for saved outfits."""

    def save(
        self,
        user_id: str,
        city: str,
        weather: WeatherSnapshot,
        inner_layers: Iterable[str],
        outer_layers: Iterable[str],
    ) -> str:
        raise NotImplementedError

    def get(self, record_id: str) -> Optional[SavedOutfitRecord]:
        raise NotImplementedError

    def list_for(self, user_id: str) -> List[SavedOutfitRecord]:
        raise NotImplementedError

    def delete(self, record_id: str) -> None:
        raise NotImplementedError


class SQLiteOutfitStore(OutfitStore):
    """Local SQLite-backed store for saved outfits."""

    def __init__(self, database_path: str | Path = "data/outfits.db") -> None:
        self.database_path = Path(database_path)
        if self.database_path.parent and not self.database_path.parent.exists():
            self.database_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_tables()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.database_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_tables(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS outfits (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    city TEXT NOT NULL,
                    weather TEXT NOT NULL,
                    inner_layers TEXT,
                    outer_layers TEXT,
                    created_at TEXT NOT NULL
                );
                """
            )
            conn.execute("CREATE INDEX IF NOT EXISTS outfits_user_id ON outfits (user_id);")

    def save(
        self,
        user_id: str,
        city: str,
        weather: WeatherSnapshot,
        inner_layers: Iterable[str],
        outer_layers: Iterable[str],
    ) -> str:
        validate_save_request(user_id, city, weather)
        record_id = uuid4().hex
        created_at = datetime.now(timezone.utc)
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO outfits (id, user_id, city, weather, inner_layers, outer_layers, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record_id,
                    user_id,
                    city,
                    json.dumps(weather.to_dict()),
                    json.dumps(sorted(inner_layers or [])),
                    json.dumps(sorted(outer_layers or [])),
                    created_at.isoformat(),
                ),
            )
        return record_id

    def _row_to_record(self, row: sqlite3.Row) -> SavedOutfitRecord:
        return SavedOutfitRecord(
            id=row["id"],
            user_id=row["user_id"],
            city=row["city"],
            weather=WeatherSnapshot.from_dict(json.loads(row["weather"])),
            inner_layers=json.loads(row["inner_layers"]) if row["inner_layers"] else [],
            outer_layers=json.loads(row["outer_layers"]) if row["outer_layers"] else [],
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def get(self, record_id: str) -> Optional[SavedOutfitRecord]:
        with self._connect() as conn:
            cursor = conn.execute("SELECT * FROM outfits WHERE id = ?", (record_id,))
            row = cursor.fetchone()
            return self._row_to_record(row) if row else None

    def list_for(self, user_id: str) -> List[SavedOutfitRecord]:
        """Records owned by ``user_id``, newest first."""

        with self._connect() as conn:
            cursor = conn.execute(
                "SELECT * FROM outfits WHERE user_id = ? ORDER BY created_at DESC, rowid DESC",
                (user_id,),
            )
            return [self._row_to_record(row) for row in cursor.fetchall()]

    def delete(self, record_id: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM outfits WHERE id = ?", (record_id,))


class OutfitPersistenceGateway:
    """Async facade running blocking store calls off the event loop.

    Storage failures surface as :class:`TransportError`.
    """

    def __init__(self, store: OutfitStore) -> None:
        self.store = store

    async def _run(self, func, *args):
        try:
            return await asyncio.to_thread(func, *args)
        except sqlite3.Error as exc:
            raise TransportError("Outfit storage is unavailable") from exc

    async def save(
        self,
        user_id: str,
        city: str,
        weather: WeatherSnapshot,
        inner_layers: Iterable[str],
        outer_layers: Iterable[str],
    ) -> str:
        validate_save_request(user_id, city, weather)
        return await self._run(
            self.store.save, user_id, city, weather, list(inner_layers), list(outer_layers)
        )

    async def get(self, record_id: str) -> Optional[SavedOutfitRecord]:
        return await self._run(self.store.get, record_id)

    async def list_for(self, user_id: str) -> List[SavedOutfitRecord]:
        return await self._run(self.store.list_for, user_id)

    async def delete(self, record_id: str) -> None:
        await self._run(self.store.delete, record_id)


__all__ = ["OutfitStore", "SQLiteOutfitStore", "OutfitPersistenceGateway", "validate_save_request"]
