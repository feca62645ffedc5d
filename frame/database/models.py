from sqlalchemy import BigInteger, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class SettingRow(Base):
    """All settings of one guild as a JSON object. Global settings use guild 0."""

    __tablename__ = "settings"

    guild: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    settings: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"SettingRow(guild={self.guild})"
