"""Series endpoints: aggregate CRUD, searches and stats."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, HTTPException, Path, Query, Request, Response
from starlette import status

from core.database import DbSession, DbSessionReadOnly
from core.ratelimit import WRITE_LIMIT, limiter
from routes.params import require_text
from schemas import (
    CharacterInSeriesCreate,
    CharacterResponse,
    SeriesResponse,
    SeriesStatsResponse,
    SeriesWrite,
)
from services.characters_service import create_character_in_series
from services.reconciliation import CharacterSpec
from services.series_service import (
    create_series,
    delete_series,
    find_series_by_genre,
    find_series_by_title,
    find_series_released_between,
    get_series,
    get_series_stats,
    list_series,
    update_series,
)

router = APIRouter(prefix="/api/v1/series", tags=["series"])

SeriesId = Annotated[int, Path(ge=1)]


def _character_specs(body: SeriesWrite) -> list[CharacterSpec]:
    return [
        CharacterSpec(name=item.name, description=item.description, id=item.id)
        for item in body.characters or []
    ]


@router.get("", response_model=list[SeriesResponse])
async def list_series_endpoint(db: DbSessionReadOnly) -> list[SeriesResponse]:
    """All series with their characters."""
    return await list_series(db)


@router.get("/stats", response_model=SeriesStatsResponse)
async def series_stats_endpoint(db: DbSessionReadOnly) -> SeriesStatsResponse:
    return await get_series_stats(db)


@router.get("/search/title", response_model=list[SeriesResponse])
async def search_by_title_endpoint(
    db: DbSessionReadOnly,
    title: Annotated[str, Query(min_length=1)],
) -> list[SeriesResponse]:
    """Series whose title contains ``title``, ignoring case."""
    return await find_series_by_title(db, require_text(title, "title"))


@router.get("/search/genre", response_model=list[SeriesResponse])
async def search_by_genre_endpoint(
    db: DbSessionReadOnly,
    genre: Annotated[str, Query(min_length=1)],
) -> list[SeriesResponse]:
    """Series whose genre equals ``genre``, ignoring case."""
    return await find_series_by_genre(db, require_text(genre, "genre"))


@router.get(
    "/search/released",
    response_model=list[SeriesResponse],
    responses={400: {"description": "start is after end"}},
)
async def search_by_release_date_endpoint(
    db: DbSessionReadOnly,
    start: date,
    end: date,
) -> list[SeriesResponse]:
    """Series released between ``start`` and ``end``, both inclusive."""
    return await find_series_released_between(db, start, end)


@router.get(
    "/{series_id}",
    response_model=SeriesResponse,
    responses={404: {"description": "Series not found"}},
)
async def get_series_endpoint(
    series_id: SeriesId, db: DbSessionReadOnly
) -> SeriesResponse:
    result = await get_series(db, series_id)
    if result is None:
        raise HTTPException(status_code=404, detail=f"Series {series_id} not found")
    return result


@router.post(
    "",
    response_model=SeriesResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Invalid body or duplicate character ids"},
        404: {"description": "A referenced character does not exist"},
        409: {"description": "Title or character name already taken"},
    },
)
@limiter.limit(WRITE_LIMIT)
async def create_series_endpoint(
    request: Request, body: SeriesWrite, db: DbSession
) -> SeriesResponse:
    """Create a series together with its characters.

    Characters listed with an id are moved into the new series.
    """
    return await create_series(
        db,
        title=body.title,
        genre=body.genre,
        release_date=body.release_date,
        characters=_character_specs(body),
        series_id=body.id,
    )


@router.put(
    "/{series_id}",
    response_model=SeriesResponse,
    responses={
        400: {"description": "Invalid body, id mismatch or duplicate ids"},
        404: {"description": "Series or referenced character not found"},
        409: {"description": "Title or character name already taken"},
    },
)
@limiter.limit(WRITE_LIMIT)
async def update_series_endpoint(
    request: Request, series_id: SeriesId, body: SeriesWrite, db: DbSession
) -> SeriesResponse:
    """Replace a series and its full character list.

    Characters currently in the series but missing from the body are deleted.
    """
    return await update_series(
        db,
        series_id,
        title=body.title,
        genre=body.genre,
        release_date=body.release_date,
        characters=_character_specs(body),
        body_id=body.id,
    )


@router.delete(
    "/{series_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"description": "Series not found"}},
)
@limiter.limit(WRITE_LIMIT)
async def delete_series_endpoint(
    request: Request, series_id: SeriesId, db: DbSession
) -> Response:
    await delete_series(db, series_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{series_id}/characters",
    response_model=CharacterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"description": "Series not found"},
        409: {"description": "Character name already taken in this series"},
    },
)
@limiter.limit(WRITE_LIMIT)
async def add_character_endpoint(
    request: Request,
    series_id: SeriesId,
    body: CharacterInSeriesCreate,
    db: DbSession,
) -> CharacterResponse:
    return await create_character_in_series(
        db, series_id, name=body.name, description=body.description
    )
