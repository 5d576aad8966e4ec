"""Tests for CharacterRepository."""

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from repositories.character_repository import CharacterRepository
from tests.factories import CharacterFactory, SeriesFactory, create_async

pytestmark = pytest.mark.integration


class TestCharacterRepositoryReads:
    """Tests for id and series lookups."""

    async def test_get_many_skips_missing_ids(self, db_session: AsyncSession):
        series = await create_async(SeriesFactory, db_session)
        a = await create_async(CharacterFactory, db_session, series_id=series.id)
        b = await create_async(CharacterFactory, db_session, series_id=series.id)

        result = await CharacterRepository(db_session).get_many_by_ids(
            [b.id, a.id, 9999, a.id]
        )

        assert [c.id for c in result] == sorted([a.id, b.id])

    async def test_get_many_with_no_ids(self, db_session: AsyncSession):
        assert await CharacterRepository(db_session).get_many_by_ids([]) == []

    async def test_list_by_series_only_returns_owned(self, db_session: AsyncSession):
        mine = await create_async(SeriesFactory, db_session)
        other = await create_async(SeriesFactory, db_session)
        owned = await create_async(CharacterFactory, db_session, series_id=mine.id)
        await create_async(CharacterFactory, db_session, series_id=other.id)

        result = await CharacterRepository(db_session).list_by_series(mine.id)

        assert [c.id for c in result] == [owned.id]

    async def test_lock_for_reconciliation_covers_owned_and_referenced(
        self, db_session: AsyncSession
    ):
        mine = await create_async(SeriesFactory, db_session)
        other = await create_async(SeriesFactory, db_session)
        borrowed = await create_async(CharacterFactory, db_session, series_id=other.id)
        owned = await create_async(CharacterFactory, db_session, series_id=mine.id)
        await create_async(CharacterFactory, db_session, series_id=other.id)

        result = await CharacterRepository(db_session).lock_for_reconciliation(
            mine.id, [borrowed.id, 9999]
        )

        assert [c.id for c in result] == [borrowed.id, owned.id]

    async def test_list_by_series_ids_groups_by_series(
        self, db_session: AsyncSession
    ):
        first = await create_async(SeriesFactory, db_session)
        second = await create_async(SeriesFactory, db_session)
        b = await create_async(CharacterFactory, db_session, series_id=second.id)
        a = await create_async(CharacterFactory, db_session, series_id=first.id)

        result = await CharacterRepository(db_session).list_by_series_ids(
            [second.id, first.id]
        )

        assert [c.id for c in result] == [a.id, b.id]


class TestCharacterRepositorySearch:
    """Tests for substring searches."""

    async def test_name_contains_ignores_case(self, db_session: AsyncSession):
        series = await create_async(SeriesFactory, db_session)
        walt = await create_async(
            CharacterFactory, db_session, series_id=series.id, name="Walter White"
        )
        await create_async(
            CharacterFactory, db_session, series_id=series.id, name="Jesse Pinkman"
        )

        result = await CharacterRepository(db_session).find_by_name_contains("WALT")

        assert [c.id for c in result] == [walt.id]

    async def test_description_search_skips_null(self, db_session: AsyncSession):
        series = await create_async(SeriesFactory, db_session)
        teacher = await create_async(
            CharacterFactory,
            db_session,
            series_id=series.id,
            description="Chemistry teacher turned manufacturer",
        )
        await create_async(
            CharacterFactory, db_session, series_id=series.id, description=None
        )

        result = await CharacterRepository(
            db_session
        ).find_by_description_contains("chemistry")

        assert [c.id for c in result] == [teacher.id]


class TestCharacterRepositoryNameExists:
    """Tests for name_exists_in_series()."""

    async def test_scoped_to_series(self, db_session: AsyncSession):
        series = await create_async(SeriesFactory, db_session)
        other = await create_async(SeriesFactory, db_session)
        await create_async(
            CharacterFactory, db_session, series_id=series.id, name="Walter White"
        )
        repo = CharacterRepository(db_session)

        assert await repo.name_exists_in_series("walter white", series.id)
        assert not await repo.name_exists_in_series("walter white", other.id)

    async def test_matches_non_ascii_casing(self, db_session: AsyncSession):
        series = await create_async(SeriesFactory, db_session)
        await create_async(
            CharacterFactory, db_session, series_id=series.id, name="ÉMILE"
        )
        repo = CharacterRepository(db_session)

        assert await repo.name_exists_in_series("émile", series.id)
        assert [c.name for c in await repo.find_by_name_contains("émi")] == ["ÉMILE"]

    async def test_excludes_own_id(self, db_session: AsyncSession):
        series = await create_async(SeriesFactory, db_session)
        walt = await create_async(
            CharacterFactory, db_session, series_id=series.id, name="Walter White"
        )

        assert not await CharacterRepository(db_session).name_exists_in_series(
            "Walter White", series.id, exclude_id=walt.id
        )


class TestCharacterRepositoryWrites:
    """Tests for deletes and referential integrity."""

    async def test_delete_by_series_returns_count(self, db_session: AsyncSession):
        series = await create_async(SeriesFactory, db_session)
        other = await create_async(SeriesFactory, db_session)
        for _ in range(3):
            await create_async(CharacterFactory, db_session, series_id=series.id)
        survivor = await create_async(CharacterFactory, db_session, series_id=other.id)
        repo = CharacterRepository(db_session)

        removed = await repo.delete_by_series(series.id)

        assert removed == 3
        assert await repo.list_by_series(series.id) == []
        assert await repo.get_by_id(survivor.id) is not None

    async def test_delete_many_ignores_empty(self, db_session: AsyncSession):
        series = await create_async(SeriesFactory, db_session)
        kept = await create_async(CharacterFactory, db_session, series_id=series.id)
        repo = CharacterRepository(db_session)

        await repo.delete_many([])

        assert await repo.get_by_id(kept.id) is not None

    async def test_foreign_key_rejects_unknown_series(self, db_session: AsyncSession):
        with pytest.raises(IntegrityError):
            await create_async(CharacterFactory, db_session, series_id=9999)

    async def test_deleted_id_is_not_reused(self, db_session: AsyncSession):
        series = await create_async(SeriesFactory, db_session)
        await create_async(CharacterFactory, db_session, series_id=series.id)
        newest = await create_async(CharacterFactory, db_session, series_id=series.id)
        repo = CharacterRepository(db_session)

        await repo.delete(newest.id)
        replacement = await repo.create(
            name="Saul Goodman", description=None, series_id=series.id
        )
        await db_session.flush()

        assert replacement.id > newest.id
        assert await repo.get_by_id(newest.id) is None

    async def test_count(self, db_session: AsyncSession):
        series = await create_async(SeriesFactory, db_session)
        for _ in range(2):
            await create_async(CharacterFactory, db_session, series_id=series.id)

        assert await CharacterRepository(db_session).count() == 2
