"""Uniqueness and existence checks against the store.

Each check raises a domain error instead of returning a flag, so callers can
chain them before staging any write. None of them modify data.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from models import Series
from repositories.character_repository import CharacterRepository
from repositories.series_repository import SeriesRepository
from services.errors import ConflictError, NotFoundError


async def assert_title_available(
    db: AsyncSession, title: str, exclude_id: int | None = None
) -> None:
    """Raise ConflictError if another series already uses ``title`` (any casing).

    ``exclude_id`` lets a series keep its own title on update.
    """
    if await SeriesRepository(db).title_exists(title, exclude_id=exclude_id):
        raise ConflictError(f"A series titled '{title}' already exists")


async def assert_series_exists(
    db: AsyncSession, series_id: int, *, lock: bool = False
) -> Series:
    """Return the series, raising NotFoundError if it does not exist.

    With ``lock=True`` the row stays locked until the transaction ends, which
    serializes concurrent character writes targeting the same series.
    """
    series = await SeriesRepository(db).get_by_id(series_id, for_update=lock)
    if series is None:
        raise NotFoundError(f"Series {series_id} not found")
    return series


async def assert_character_name_available(
    db: AsyncSession,
    name: str,
    series_id: int,
    exclude_id: int | None = None,
) -> None:
    """Raise ConflictError if the series already has a character named ``name``.

    Names are compared case-insensitively and only within one series; the
    same name may appear in different series.
    """
    if await CharacterRepository(db).name_exists_in_series(
        name, series_id, exclude_id=exclude_id
    ):
        raise ConflictError(
            f"A character named '{name}' already exists in series {series_id}"
        )
