"""Tests for the uniqueness and existence checks."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from services.catalog_validation import (
    assert_character_name_available,
    assert_series_exists,
    assert_title_available,
)
from services.errors import ConflictError, NotFoundError
from tests.factories import CharacterFactory, SeriesFactory, create_async

pytestmark = pytest.mark.integration


class TestAssertTitleAvailable:
    async def test_free_title_passes(self, db_session: AsyncSession):
        await assert_title_available(db_session, "Breaking Bad")

    async def test_case_variant_conflicts(self, db_session: AsyncSession):
        await create_async(SeriesFactory, db_session, title="Breaking Bad")

        with pytest.raises(ConflictError, match="already exists"):
            await assert_title_available(db_session, "bReAkInG bAd")

    async def test_own_title_allowed_with_exclude(self, db_session: AsyncSession):
        series = await create_async(SeriesFactory, db_session, title="Breaking Bad")

        await assert_title_available(db_session, "BREAKING BAD", exclude_id=series.id)


class TestAssertSeriesExists:
    async def test_returns_series(self, db_session: AsyncSession):
        series = await create_async(SeriesFactory, db_session)

        assert await assert_series_exists(db_session, series.id) is series

    async def test_missing_raises_not_found(self, db_session: AsyncSession):
        with pytest.raises(NotFoundError):
            await assert_series_exists(db_session, 424242, lock=True)


class TestAssertCharacterNameAvailable:
    async def test_conflict_in_same_series(self, db_session: AsyncSession):
        series = await create_async(SeriesFactory, db_session)
        await create_async(
            CharacterFactory, db_session, series_id=series.id, name="Walter White"
        )

        with pytest.raises(ConflictError):
            await assert_character_name_available(
                db_session, "WALTER WHITE", series.id
            )

    async def test_same_name_in_other_series_passes(self, db_session: AsyncSession):
        series = await create_async(SeriesFactory, db_session)
        other = await create_async(SeriesFactory, db_session)
        await create_async(
            CharacterFactory, db_session, series_id=series.id, name="Walter White"
        )

        await assert_character_name_available(db_session, "Walter White", other.id)

    async def test_self_exclusion(self, db_session: AsyncSession):
        series = await create_async(SeriesFactory, db_session)
        walt = await create_async(
            CharacterFactory, db_session, series_id=series.id, name="Walter White"
        )

        await assert_character_name_available(
            db_session, "walter white", series.id, exclude_id=walt.id
        )
