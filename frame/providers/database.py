import json
import logging
from typing import Any

from sqlalchemy import delete, select

from ..database.manager import DatabaseManager
from ..database.models import SettingRow
from .base import GLOBAL, CachedSettingProvider
from .broadcast import SettingBroadcaster

logger = logging.getLogger(__name__)


def _row_id(guild_id: str) -> int:
    return 0 if guild_id == GLOBAL else int(guild_id)


class SQLAlchemyProvider(CachedSettingProvider):
    """Settings persisted as one JSON object per guild in the ``settings`` table."""

    def __init__(self, db: DatabaseManager | None = None, broadcaster: SettingBroadcaster | None = None) -> None:
        super().__init__(broadcaster)
        self.db = db or DatabaseManager()

    async def _load(self) -> dict[str, dict[str, Any]]:
        await self.db.create_tables()

        loaded: dict[str, dict[str, Any]] = {}
        async with self.db.session() as session:
            rows = (await session.execute(select(SettingRow))).scalars().all()

        for row in rows:
            try:
                settings = json.loads(row.settings)
            except (TypeError, ValueError):
                logger.warning(f"Couldn't parse the settings stored for guild {row.guild}; skipping")
                continue
            if not isinstance(settings, dict):
                logger.warning(f"Settings stored for guild {row.guild} are not an object; skipping")
                continue
            loaded[GLOBAL if row.guild == 0 else str(row.guild)] = settings
        return loaded

    async def _persist(self, guild_id: str, settings: dict[str, Any]) -> None:
        async with self.db.session() as session:
            await session.merge(SettingRow(guild=_row_id(guild_id), settings=json.dumps(settings)))

    async def _delete(self, guild_id: str) -> None:
        async with self.db.session() as session:
            await session.execute(delete(SettingRow).where(SettingRow.guild == _row_id(guild_id)))

    async def destroy(self) -> None:
        await super().destroy()
        await self.db.close()
