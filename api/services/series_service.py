"""Series service: aggregate writes and reads for series with their characters."""

from collections import defaultdict
from collections.abc import Sequence
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from core.logger import get_logger
from core.telemetry import track_operation
from core.wide_event import set_wide_event_fields
from models import Character, Series, fold_case
from repositories.character_repository import CharacterRepository
from repositories.series_repository import SeriesRepository
from schemas import (
    CatalogCountsResponse,
    CharacterResponse,
    SeriesResponse,
    SeriesStatsResponse,
)
from services.catalog_validation import assert_title_available
from services.errors import InvalidArgumentError, NotFoundError, flush_or_conflict
from services.reconciliation import CharacterSpec, reconcile_characters

logger = get_logger(__name__)


def _to_series_response(
    series: Series, characters: Sequence[Character]
) -> SeriesResponse:
    return SeriesResponse(
        id=series.id,
        title=series.title,
        genre=series.genre,
        release_date=series.release_date,
        characters=[
            CharacterResponse(
                id=c.id,
                name=c.name,
                description=c.description,
                series_id=series.id,
                series_title=series.title,
            )
            for c in characters
        ],
    )


async def _build_aggregates(
    db: AsyncSession, series_list: Sequence[Series]
) -> list[SeriesResponse]:
    """Attach owned characters to each series with a single extra query."""
    characters = await CharacterRepository(db).list_by_series_ids(
        [s.id for s in series_list]
    )
    by_series: dict[int, list[Character]] = defaultdict(list)
    for character in characters:
        by_series[character.series_id].append(character)
    return [_to_series_response(s, by_series[s.id]) for s in series_list]


@track_operation("series_create")
async def create_series(
    db: AsyncSession,
    *,
    title: str,
    genre: str,
    release_date: date,
    characters: Sequence[CharacterSpec] | None = None,
    series_id: int | None = None,
) -> SeriesResponse:
    """Create a series together with its initial characters.

    A non-positive ``series_id`` is treated as absent; a positive one is
    rejected because a create always produces a new series.
    """
    if series_id is not None and series_id > 0:
        raise InvalidArgumentError("The id must be empty when creating a series")

    await assert_title_available(db, title)

    series = await SeriesRepository(db).create(
        title=title, genre=genre, release_date=release_date
    )
    await flush_or_conflict(db, f"A series titled '{title}' already exists")

    owned = await reconcile_characters(db, series.id, characters or [])

    logger.info("series.created", series_id=series.id, character_count=len(owned))
    set_wide_event_fields(series_id=series.id)
    return _to_series_response(series, owned)


@track_operation("series_update")
async def update_series(
    db: AsyncSession,
    series_id: int,
    *,
    title: str,
    genre: str,
    release_date: date,
    characters: Sequence[CharacterSpec] | None = None,
    body_id: int | None = None,
) -> SeriesResponse:
    """Overwrite a series and replace its character set with ``characters``.

    The list is a full replacement: owned characters that are not listed are
    deleted, and ``None`` or an empty list removes every character.
    """
    repo = SeriesRepository(db)
    series = await repo.get_by_id(series_id, for_update=True)
    if series is None:
        raise NotFoundError(f"Series {series_id} not found")

    if body_id is not None and body_id > 0 and body_id != series_id:
        raise InvalidArgumentError(
            f"Body id {body_id} does not match series {series_id}"
        )

    if fold_case(series.title) != fold_case(title):
        await assert_title_available(db, title, exclude_id=series_id)

    await repo.update(series, title=title, genre=genre, release_date=release_date)
    await flush_or_conflict(db, f"A series titled '{title}' already exists")

    owned = await reconcile_characters(db, series_id, characters or [])

    logger.info("series.updated", series_id=series_id, character_count=len(owned))
    set_wide_event_fields(series_id=series_id)
    return _to_series_response(series, owned)


@track_operation("series_delete")
async def delete_series(db: AsyncSession, series_id: int) -> None:
    """Delete a series and every character it owns in the same transaction."""
    series = await SeriesRepository(db).get_by_id(series_id, for_update=True)
    if series is None:
        raise NotFoundError(f"Series {series_id} not found")

    removed = await CharacterRepository(db).delete_by_series(series_id)
    await SeriesRepository(db).delete(series_id)

    logger.info("series.deleted", series_id=series_id, characters_removed=removed)
    set_wide_event_fields(series_id=series_id, characters_removed=removed)


async def get_series(db: AsyncSession, series_id: int) -> SeriesResponse | None:
    series = await SeriesRepository(db).get_by_id(series_id)
    if series is None:
        return None
    characters = await CharacterRepository(db).list_by_series(series_id)
    return _to_series_response(series, characters)


async def list_series(db: AsyncSession) -> list[SeriesResponse]:
    return await _build_aggregates(db, await SeriesRepository(db).list_all())


async def find_series_by_title(db: AsyncSession, fragment: str) -> list[SeriesResponse]:
    """Series whose title contains ``fragment``, ignoring case."""
    series_list = await SeriesRepository(db).find_by_title_contains(fragment)
    return await _build_aggregates(db, series_list)


async def find_series_by_genre(db: AsyncSession, genre: str) -> list[SeriesResponse]:
    """Series whose genre equals ``genre``, ignoring case."""
    series_list = await SeriesRepository(db).find_by_genre(genre)
    return await _build_aggregates(db, series_list)


async def find_series_released_between(
    db: AsyncSession, start: date, end: date
) -> list[SeriesResponse]:
    if start > end:
        raise InvalidArgumentError("start must not be after end")
    series_list = await SeriesRepository(db).find_released_between(start, end)
    return await _build_aggregates(db, series_list)


async def get_series_stats(db: AsyncSession) -> SeriesStatsResponse:
    """Total series and distinct genres.

    Genres are counted case-sensitively ("Drama" and "drama" are two genres),
    unlike title and name uniqueness.
    """
    repo = SeriesRepository(db)
    return SeriesStatsResponse(
        total_series=await repo.count(),
        unique_genres=await repo.count_distinct_genres(),
    )


async def get_catalog_counts(db: AsyncSession) -> CatalogCountsResponse:
    return CatalogCountsResponse(
        series=await SeriesRepository(db).count(),
        characters=await CharacterRepository(db).count(),
    )
