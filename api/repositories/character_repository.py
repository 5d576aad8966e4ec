"""Character repository for database operations."""

from collections.abc import Sequence

from sqlalchemy import delete, exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models import Character, fold_case
from repositories.utils import log_slow_query


class CharacterRepository:
    """Repository for Character database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(
        self, character_id: int, *, for_update: bool = False
    ) -> Character | None:
        stmt = select(Character).where(Character.id == character_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_many_by_ids(self, character_ids: Sequence[int]) -> list[Character]:
        """Get several characters in one query. Missing IDs are silently skipped."""
        if not character_ids:
            return []
        result = await self.db.execute(
            select(Character)
            .where(Character.id.in_(list(set(character_ids))))
            .order_by(Character.id)
        )
        return list(result.scalars().all())

    @log_slow_query("characters_list_all")
    async def list_all(self) -> list[Character]:
        result = await self.db.execute(select(Character).order_by(Character.id))
        return list(result.scalars().all())

    @log_slow_query("characters_list_by_series")
    async def list_by_series(self, series_id: int) -> list[Character]:
        """All characters currently owned by a series."""
        result = await self.db.execute(
            select(Character)
            .where(Character.series_id == series_id)
            .order_by(Character.id)
        )
        return list(result.scalars().all())

    @log_slow_query("characters_lock_for_reconciliation")
    async def lock_for_reconciliation(
        self, series_id: int, character_ids: Sequence[int]
    ) -> list[Character]:
        """Lock a series' characters plus ``character_ids`` in one statement.

        Rows are locked in id order, so concurrent series writes touching
        overlapping characters queue behind each other instead of deadlocking.
        """
        condition = Character.series_id == series_id
        if character_ids:
            condition = condition | Character.id.in_(list(set(character_ids)))
        result = await self.db.execute(
            select(Character).where(condition).order_by(Character.id).with_for_update()
        )
        return list(result.scalars().all())

    @log_slow_query("characters_list_by_series_ids")
    async def list_by_series_ids(self, series_ids: Sequence[int]) -> list[Character]:
        if not series_ids:
            return []
        result = await self.db.execute(
            select(Character)
            .where(Character.series_id.in_(list(set(series_ids))))
            .order_by(Character.series_id, Character.id)
        )
        return list(result.scalars().all())

    @log_slow_query("characters_find_by_name_contains")
    async def find_by_name_contains(self, fragment: str) -> list[Character]:
        result = await self.db.execute(
            select(Character)
            .where(Character.name_key.contains(fold_case(fragment), autoescape=True))
            .order_by(Character.id)
        )
        return list(result.scalars().all())

    @log_slow_query("characters_find_by_description_contains")
    async def find_by_description_contains(self, fragment: str) -> list[Character]:
        """Characters with no description never match."""
        result = await self.db.execute(
            select(Character)
            .where(
                Character.description.is_not(None),
                func.lower(Character.description).contains(
                    fragment.lower(), autoescape=True
                ),
            )
            .order_by(Character.id)
        )
        return list(result.scalars().all())

    async def name_exists_in_series(
        self, name: str, series_id: int, exclude_id: int | None = None
    ) -> bool:
        """Check whether the series has a character with this name (any casing)."""
        condition = (Character.series_id == series_id) & (
            Character.name_key == fold_case(name)
        )
        if exclude_id is not None:
            condition = condition & (Character.id != exclude_id)
        result = await self.db.execute(select(exists().where(condition)))
        return bool(result.scalar())

    async def count(self) -> int:
        result = await self.db.execute(select(func.count(Character.id)))
        return int(result.scalar_one())

    async def create(
        self, *, name: str, description: str | None, series_id: int
    ) -> Character:
        """Stage a new character. Caller flushes to obtain the ID."""
        character = Character(name=name, description=description, series_id=series_id)
        self.db.add(character)
        return character

    async def update(
        self,
        character: Character,
        *,
        name: str,
        description: str | None,
        series_id: int,
    ) -> Character:
        character.name = name
        character.description = description
        character.series_id = series_id
        return character

    async def delete(self, character_id: int) -> None:
        await self.db.execute(delete(Character).where(Character.id == character_id))

    async def delete_many(self, character_ids: Sequence[int]) -> None:
        if not character_ids:
            return
        await self.db.execute(
            delete(Character).where(Character.id.in_(list(set(character_ids))))
        )

    async def delete_by_series(self, series_id: int) -> int:
        """Delete every character owned by a series. Returns the number removed."""
        result = await self.db.execute(
            delete(Character).where(Character.series_id == series_id)
        )
        return result.rowcount or 0
