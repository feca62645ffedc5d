from .base import CachedSettingProvider


class MemoryProvider(CachedSettingProvider):
    """Settings kept for the lifetime of the process only."""
