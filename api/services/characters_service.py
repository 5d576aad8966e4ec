"""Characters service: single-character writes and character queries.

Every character belongs to exactly one series. Writes lock the target series
row so concurrent writes to the same series are serialized, and name
uniqueness is checked per series, ignoring case.
"""

from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from core.logger import get_logger
from core.telemetry import track_operation
from core.wide_event import set_wide_event_fields
from models import Character, Series, fold_case
from repositories.character_repository import CharacterRepository
from repositories.series_repository import SeriesRepository
from schemas import CharacterResponse
from services.catalog_validation import (
    assert_character_name_available,
    assert_series_exists,
)
from services.errors import NotFoundError, flush_or_conflict

logger = get_logger(__name__)


def _to_character_response(
    character: Character, series_title: str | None
) -> CharacterResponse:
    return CharacterResponse(
        id=character.id,
        name=character.name,
        description=character.description,
        series_id=character.series_id,
        series_title=series_title,
    )


async def _with_series_titles(
    db: AsyncSession, characters: Sequence[Character]
) -> list[CharacterResponse]:
    series_list = await SeriesRepository(db).get_many_by_ids(
        [c.series_id for c in characters]
    )
    titles = {s.id: s.title for s in series_list}
    return [_to_character_response(c, titles.get(c.series_id)) for c in characters]


async def _create(
    db: AsyncSession, series: Series, name: str, description: str | None
) -> CharacterResponse:
    await assert_character_name_available(db, name, series.id)

    character = await CharacterRepository(db).create(
        name=name, description=description, series_id=series.id
    )
    await flush_or_conflict(
        db, f"A character named '{name}' already exists in series {series.id}"
    )

    logger.info("character.created", character_id=character.id, series_id=series.id)
    set_wide_event_fields(character_id=character.id, series_id=series.id)
    return _to_character_response(character, series.title)


@track_operation("character_create")
async def create_character(
    db: AsyncSession, *, name: str, description: str | None, series_id: int
) -> CharacterResponse:
    """Create a character under the series named in the body."""
    series = await assert_series_exists(db, series_id, lock=True)
    return await _create(db, series, name, description)


@track_operation("character_create_in_series")
async def create_character_in_series(
    db: AsyncSession, series_id: int, *, name: str, description: str | None
) -> CharacterResponse:
    """Create a character under the series named in the path."""
    series = await assert_series_exists(db, series_id, lock=True)
    return await _create(db, series, name, description)


@track_operation("character_update")
async def update_character(
    db: AsyncSession,
    character_id: int,
    *,
    name: str,
    description: str | None,
    series_id: int,
) -> CharacterResponse:
    """Overwrite a character, possibly moving it to another series.

    The name is re-checked only when it changes (ignoring case) or the
    character moves, so a character can keep its own name.
    """
    repo = CharacterRepository(db)
    character = await repo.get_by_id(character_id, for_update=True)
    if character is None:
        raise NotFoundError(f"Character {character_id} not found")

    series = await assert_series_exists(db, series_id, lock=True)

    moved = character.series_id != series_id
    if moved or fold_case(character.name) != fold_case(name):
        await assert_character_name_available(
            db, name, series_id, exclude_id=character_id
        )

    previous_series_id = character.series_id
    await repo.update(
        character, name=name, description=description, series_id=series_id
    )
    await flush_or_conflict(db, f"Character {character_id} was modified concurrently")

    logger.info(
        "character.updated",
        character_id=character_id,
        series_id=series_id,
        previous_series_id=previous_series_id if moved else None,
    )
    set_wide_event_fields(character_id=character_id, series_id=series_id)
    return _to_character_response(character, series.title)


@track_operation("character_delete")
async def delete_character(db: AsyncSession, character_id: int) -> None:
    repo = CharacterRepository(db)
    character = await repo.get_by_id(character_id, for_update=True)
    if character is None:
        raise NotFoundError(f"Character {character_id} not found")

    await repo.delete(character_id)

    logger.info(
        "character.deleted",
        character_id=character_id,
        series_id=character.series_id,
    )
    set_wide_event_fields(character_id=character_id)


async def get_character(
    db: AsyncSession, character_id: int
) -> CharacterResponse | None:
    character = await CharacterRepository(db).get_by_id(character_id)
    if character is None:
        return None
    series = await SeriesRepository(db).get_by_id(character.series_id)
    return _to_character_response(character, series.title if series else None)


async def list_characters(db: AsyncSession) -> list[CharacterResponse]:
    return await _with_series_titles(db, await CharacterRepository(db).list_all())


async def find_characters_by_series(
    db: AsyncSession, series_id: int
) -> list[CharacterResponse]:
    """Characters of one series. An unknown series yields an empty list."""
    characters = await CharacterRepository(db).list_by_series(series_id)
    return await _with_series_titles(db, characters)


async def find_characters_by_name(
    db: AsyncSession, fragment: str
) -> list[CharacterResponse]:
    characters = await CharacterRepository(db).find_by_name_contains(fragment)
    return await _with_series_titles(db, characters)


async def find_characters_by_description(
    db: AsyncSession, fragment: str
) -> list[CharacterResponse]:
    characters = await CharacterRepository(db).find_by_description_contains(fragment)
    return await _with_series_titles(db, characters)
