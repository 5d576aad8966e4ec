"""SQLAlchemy models for the series catalog."""

from datetime import UTC, date, datetime

from sqlalchemy import Date, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, declared_attr, mapped_column, validates

from core.database import Base

TITLE_MAX_LENGTH = 255
GENRE_MAX_LENGTH = 100
NAME_MAX_LENGTH = 255
DESCRIPTION_MAX_LENGTH = 500


def utcnow() -> datetime:
    """Return current UTC time (timezone-aware)."""
    return datetime.now(UTC)


def fold_case(value: str) -> str:
    """Comparison key for every case-insensitive match in the catalog.

    Stored alongside titles, genres and names so SQL equality on the key
    agrees with the comparisons the services make in Python.
    """
    return value.casefold()


class TimestampMixin:
    """Mixin that adds created_at and updated_at timestamp columns."""

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(DateTime(timezone=True), default=utcnow)

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class Series(TimestampMixin, Base):
    """A television series; root of the series/characters aggregate.

    Owned characters are not mapped as a relationship: the character set is
    always re-derived from the store by ``Character.series_id``.
    """

    __tablename__ = "series"
    __table_args__ = (
        Index("uq_series_title_key", "title_key", unique=True),
        Index("ix_series_genre_key", "genre_key"),
        # Deleted ids are never handed out again
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False)
    title_key: Mapped[str] = mapped_column(Text, nullable=False)
    genre: Mapped[str] = mapped_column(String(GENRE_MAX_LENGTH), nullable=False)
    genre_key: Mapped[str] = mapped_column(Text, nullable=False)
    release_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)

    @validates("title")
    def _sync_title_key(self, _key: str, value: str) -> str:
        self.title_key = fold_case(value)
        return value

    @validates("genre")
    def _sync_genre_key(self, _key: str, value: str) -> str:
        self.genre_key = fold_case(value)
        return value


class Character(TimestampMixin, Base):
    """A character owned by exactly one series.

    Name uniqueness within a series is enforced by the service layer against
    the final state of each write, so same-request renames that swap two
    names are allowed.
    """

    __tablename__ = "characters"
    __table_args__ = (
        Index("ix_characters_series_id_id", "series_id", "id"),
        Index("ix_characters_series_id_name_key", "series_id", "name_key"),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False)
    name_key: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(
        String(DESCRIPTION_MAX_LENGTH), nullable=True
    )
    series_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("series.id", ondelete="CASCADE"),
        nullable=False,
    )

    @validates("name")
    def _sync_name_key(self, _key: str, value: str) -> str:
        self.name_key = fold_case(value)
        return value
