from .base import GLOBAL, CachedSettingProvider, SettingProvider
from .broadcast import RedisSettingBroadcaster, SettingBroadcaster, SettingChange
from .database import SQLAlchemyProvider
from .memory import MemoryProvider

__all__ = [
    "GLOBAL",
    "SettingProvider",
    "CachedSettingProvider",
    "MemoryProvider",
    "SQLAlchemyProvider",
    "SettingBroadcaster",
    "RedisSettingBroadcaster",
    "SettingChange",
]
