"""Tests for SeriesRepository.

Runs against the in-memory SQLite database from conftest.
"""

from datetime import date

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from repositories.series_repository import SeriesRepository
from tests.factories import SeriesFactory, create_async

pytestmark = pytest.mark.integration


class TestSeriesRepositoryGetById:
    """Tests for SeriesRepository.get_by_id()."""

    async def test_returns_series_when_exists(self, db_session: AsyncSession):
        series = await create_async(SeriesFactory, db_session)

        result = await SeriesRepository(db_session).get_by_id(series.id)

        assert result is not None
        assert result.title == series.title

    async def test_returns_none_when_not_exists(self, db_session: AsyncSession):
        assert await SeriesRepository(db_session).get_by_id(9999) is None

    async def test_for_update_returns_same_row(self, db_session: AsyncSession):
        """FOR UPDATE is dropped by SQLite but the lookup still works."""
        series = await create_async(SeriesFactory, db_session)

        result = await SeriesRepository(db_session).get_by_id(
            series.id, for_update=True
        )

        assert result is series


class TestSeriesRepositoryLookups:
    """Tests for the predicate lookups."""

    async def test_title_contains_ignores_case(self, db_session: AsyncSession):
        bb = await create_async(SeriesFactory, db_session, title="Breaking Bad")
        await create_async(SeriesFactory, db_session, title="The Wire")

        result = await SeriesRepository(db_session).find_by_title_contains("BAD")

        assert [s.id for s in result] == [bb.id]

    async def test_title_contains_treats_wildcards_literally(
        self, db_session: AsyncSession
    ):
        await create_async(SeriesFactory, db_session, title="Breaking Bad")
        pct = await create_async(SeriesFactory, db_session, title="100% Wolf")

        result = await SeriesRepository(db_session).find_by_title_contains("%")

        assert [s.id for s in result] == [pct.id]

    async def test_genre_is_exact_and_ignores_case(self, db_session: AsyncSession):
        drama = await create_async(SeriesFactory, db_session, genre="Drama")
        await create_async(SeriesFactory, db_session, genre="Docudrama")

        result = await SeriesRepository(db_session).find_by_genre("drama")

        assert [s.id for s in result] == [drama.id]

    async def test_released_between_is_inclusive(self, db_session: AsyncSession):
        early = await create_async(
            SeriesFactory, db_session, release_date=date(2008, 1, 20)
        )
        late = await create_async(
            SeriesFactory, db_session, release_date=date(2013, 9, 29)
        )
        await create_async(SeriesFactory, db_session, release_date=date(2019, 1, 1))

        result = await SeriesRepository(db_session).find_released_between(
            date(2008, 1, 20), date(2013, 9, 29)
        )

        assert [s.id for s in result] == [early.id, late.id]


class TestSeriesRepositoryTitleExists:
    """Tests for SeriesRepository.title_exists()."""

    async def test_matches_other_casing(self, db_session: AsyncSession):
        await create_async(SeriesFactory, db_session, title="Breaking Bad")

        assert await SeriesRepository(db_session).title_exists("BREAKING BAD")

    async def test_excludes_own_id(self, db_session: AsyncSession):
        series = await create_async(SeriesFactory, db_session, title="Breaking Bad")
        repo = SeriesRepository(db_session)

        assert not await repo.title_exists("breaking bad", exclude_id=series.id)

    async def test_matches_non_ascii_casing(self, db_session: AsyncSession):
        await create_async(SeriesFactory, db_session, title="Élite")
        repo = SeriesRepository(db_session)

        assert await repo.title_exists("ÉLITE")
        assert await repo.title_exists("élite")
        found = await repo.find_by_title_contains("ÉLI")
        assert [s.title for s in found] == ["Élite"]

    async def test_follows_renamed_title(self, db_session: AsyncSession):
        series = await create_async(SeriesFactory, db_session, title="Breaking Bad")
        repo = SeriesRepository(db_session)

        await repo.update(
            series, title="Ozark", genre="Crime", release_date=date(2017, 7, 21)
        )
        await db_session.flush()

        assert await repo.title_exists("OZARK")
        assert not await repo.title_exists("breaking bad")

    async def test_unique_index_rejects_case_variant(self, db_session: AsyncSession):
        await create_async(SeriesFactory, db_session, title="Breaking Bad")

        with pytest.raises(IntegrityError):
            await create_async(SeriesFactory, db_session, title="breaking bad")


class TestSeriesRepositoryCounts:
    """Tests for count() and count_distinct_genres()."""

    async def test_empty_store(self, db_session: AsyncSession):
        repo = SeriesRepository(db_session)

        assert await repo.count() == 0
        assert await repo.count_distinct_genres() == 0

    async def test_genres_counted_case_sensitively(self, db_session: AsyncSession):
        for genre in ("Drama", "drama", "Comedy", "Drama"):
            await create_async(SeriesFactory, db_session, genre=genre)
        repo = SeriesRepository(db_session)

        assert await repo.count() == 4
        assert await repo.count_distinct_genres() == 3


class TestSeriesRepositoryWrites:
    """Tests for create(), update() and delete()."""

    async def test_create_assigns_id_on_flush(self, db_session: AsyncSession):
        repo = SeriesRepository(db_session)

        series = await repo.create(
            title="Lost", genre="Drama", release_date=date(2004, 9, 22)
        )
        assert series.id is None
        await db_session.flush()

        assert series.id is not None

    async def test_update_overwrites_fields(self, db_session: AsyncSession):
        series = await create_async(SeriesFactory, db_session)
        repo = SeriesRepository(db_session)

        await repo.update(
            series, title="Renamed", genre="Crime", release_date=date(2001, 1, 1)
        )
        await db_session.flush()

        reloaded = await repo.get_by_id(series.id)
        assert reloaded is not None
        assert (reloaded.title, reloaded.genre) == ("Renamed", "Crime")

    async def test_delete_removes_row(self, db_session: AsyncSession):
        series = await create_async(SeriesFactory, db_session)
        repo = SeriesRepository(db_session)

        await repo.delete(series.id)

        assert await repo.get_by_id(series.id) is None

    async def test_deleted_id_is_not_reused(self, db_session: AsyncSession):
        repo = SeriesRepository(db_session)
        await create_async(SeriesFactory, db_session)
        newest = await create_async(SeriesFactory, db_session)

        await repo.delete(newest.id)
        replacement = await create_async(SeriesFactory, db_session)

        assert replacement.id > newest.id
        assert await repo.get_by_id(newest.id) is None
