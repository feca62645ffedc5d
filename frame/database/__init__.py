from .manager import DatabaseManager
from .models import Base, SettingRow

__all__ = ["DatabaseManager", "Base", "SettingRow"]
