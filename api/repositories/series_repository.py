"""Series repository for database operations."""

from collections.abc import Sequence
from datetime import date

from sqlalchemy import delete, distinct, exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models import Series, fold_case
from repositories.utils import log_slow_query


class SeriesRepository:
    """Repository for Series database operations.

    Title and genre matching is case-insensitive throughout and always goes
    through the stored ``fold_case`` keys.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(
        self, series_id: int, *, for_update: bool = False
    ) -> Series | None:
        """Get a series by ID, optionally locking the row until commit."""
        stmt = select(Series).where(Series.id == series_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_many_by_ids(self, series_ids: Sequence[int]) -> list[Series]:
        """Get several series in one query. Missing IDs are silently skipped."""
        if not series_ids:
            return []
        result = await self.db.execute(
            select(Series).where(Series.id.in_(list(set(series_ids))))
        )
        return list(result.scalars().all())

    @log_slow_query("series_list_all")
    async def list_all(self) -> list[Series]:
        result = await self.db.execute(select(Series).order_by(Series.id))
        return list(result.scalars().all())

    @log_slow_query("series_find_by_title_contains")
    async def find_by_title_contains(self, fragment: str) -> list[Series]:
        result = await self.db.execute(
            select(Series)
            .where(Series.title_key.contains(fold_case(fragment), autoescape=True))
            .order_by(Series.id)
        )
        return list(result.scalars().all())

    @log_slow_query("series_find_by_genre")
    async def find_by_genre(self, genre: str) -> list[Series]:
        """Exact, case-insensitive genre match."""
        result = await self.db.execute(
            select(Series)
            .where(Series.genre_key == fold_case(genre))
            .order_by(Series.id)
        )
        return list(result.scalars().all())

    @log_slow_query("series_find_released_between")
    async def find_released_between(self, start: date, end: date) -> list[Series]:
        """Series released within [start, end], both ends inclusive."""
        result = await self.db.execute(
            select(Series)
            .where(Series.release_date.between(start, end))
            .order_by(Series.release_date, Series.id)
        )
        return list(result.scalars().all())

    async def title_exists(self, title: str, exclude_id: int | None = None) -> bool:
        """Check whether another series already uses this title (any casing)."""
        condition = Series.title_key == fold_case(title)
        if exclude_id is not None:
            condition = condition & (Series.id != exclude_id)
        result = await self.db.execute(select(exists().where(condition)))
        return bool(result.scalar())

    async def count(self) -> int:
        result = await self.db.execute(select(func.count(Series.id)))
        return int(result.scalar_one())

    async def count_distinct_genres(self) -> int:
        """Distinct genre strings, compared case-sensitively."""
        result = await self.db.execute(select(func.count(distinct(Series.genre))))
        return int(result.scalar_one())

    async def create(self, *, title: str, genre: str, release_date: date) -> Series:
        """Stage a new series. Caller flushes to obtain the ID."""
        series = Series(title=title, genre=genre, release_date=release_date)
        self.db.add(series)
        return series

    async def update(
        self, series: Series, *, title: str, genre: str, release_date: date
    ) -> Series:
        series.title = title
        series.genre = genre
        series.release_date = release_date
        return series

    async def delete(self, series_id: int) -> None:
        """Delete the series row only; owned characters are removed by the caller."""
        await self.db.execute(delete(Series).where(Series.id == series_id))
