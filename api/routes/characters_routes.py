"""Character endpoints: standalone CRUD and searches."""

from typing import Annotated

from fastapi import APIRouter, HTTPException, Path, Query, Request, Response
from starlette import status

from core.database import DbSession, DbSessionReadOnly
from core.ratelimit import WRITE_LIMIT, limiter
from routes.params import require_text
from schemas import CharacterInSeriesCreate, CharacterResponse, CharacterWrite
from services.characters_service import (
    create_character,
    create_character_in_series,
    delete_character,
    find_characters_by_description,
    find_characters_by_name,
    find_characters_by_series,
    get_character,
    list_characters,
    update_character,
)

router = APIRouter(prefix="/api/v1/characters", tags=["characters"])

CharacterId = Annotated[int, Path(ge=1)]
SeriesId = Annotated[int, Path(ge=1)]


@router.get("", response_model=list[CharacterResponse])
async def list_characters_endpoint(db: DbSessionReadOnly) -> list[CharacterResponse]:
    return await list_characters(db)


@router.get("/search", response_model=list[CharacterResponse])
async def search_by_name_endpoint(
    db: DbSessionReadOnly,
    name: Annotated[str, Query(min_length=1)],
) -> list[CharacterResponse]:
    """Characters whose name contains ``name``, ignoring case."""
    return await find_characters_by_name(db, require_text(name, "name"))


@router.get("/search/description", response_model=list[CharacterResponse])
async def search_by_description_endpoint(
    db: DbSessionReadOnly,
    description: Annotated[str, Query(min_length=1)],
) -> list[CharacterResponse]:
    return await find_characters_by_description(
        db, require_text(description, "description")
    )


@router.get("/series/{series_id}", response_model=list[CharacterResponse])
async def list_by_series_endpoint(
    series_id: SeriesId, db: DbSessionReadOnly
) -> list[CharacterResponse]:
    """Characters of one series; empty if the series does not exist."""
    return await find_characters_by_series(db, series_id)


@router.get(
    "/{character_id}",
    response_model=CharacterResponse,
    responses={404: {"description": "Character not found"}},
)
async def get_character_endpoint(
    character_id: CharacterId, db: DbSessionReadOnly
) -> CharacterResponse:
    result = await get_character(db, character_id)
    if result is None:
        raise HTTPException(
            status_code=404, detail=f"Character {character_id} not found"
        )
    return result


@router.post(
    "",
    response_model=CharacterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"description": "Series not found"},
        409: {"description": "Character name already taken in this series"},
    },
)
@limiter.limit(WRITE_LIMIT)
async def create_character_endpoint(
    request: Request, body: CharacterWrite, db: DbSession
) -> CharacterResponse:
    return await create_character(
        db, name=body.name, description=body.description, series_id=body.series_id
    )


@router.post(
    "/series/{series_id}",
    response_model=CharacterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"description": "Series not found"},
        409: {"description": "Character name already taken in this series"},
    },
)
@limiter.limit(WRITE_LIMIT)
async def create_character_in_series_endpoint(
    request: Request,
    series_id: SeriesId,
    body: CharacterInSeriesCreate,
    db: DbSession,
) -> CharacterResponse:
    return await create_character_in_series(
        db, series_id, name=body.name, description=body.description
    )


@router.put(
    "/{character_id}",
    response_model=CharacterResponse,
    responses={
        404: {"description": "Character or target series not found"},
        409: {"description": "Character name already taken in the target series"},
    },
)
@limiter.limit(WRITE_LIMIT)
async def update_character_endpoint(
    request: Request,
    character_id: CharacterId,
    body: CharacterWrite,
    db: DbSession,
) -> CharacterResponse:
    """Overwrite a character; a different ``series_id`` moves it."""
    return await update_character(
        db,
        character_id,
        name=body.name,
        description=body.description,
        series_id=body.series_id,
    )


@router.delete(
    "/{character_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"description": "Character not found"}},
)
@limiter.limit(WRITE_LIMIT)
async def delete_character_endpoint(
    request: Request, character_id: CharacterId, db: DbSession
) -> Response:
    await delete_character(db, character_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
