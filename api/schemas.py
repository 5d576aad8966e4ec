"""Pydantic schemas for API request/response validation."""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models import (
    DESCRIPTION_MAX_LENGTH,
    GENRE_MAX_LENGTH,
    NAME_MAX_LENGTH,
    TITLE_MAX_LENGTH,
)


def _strip_required(value: str, field_label: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError(f"{field_label} cannot be blank")
    return value


# =============================================================================
# Characters
# =============================================================================


class CharacterBase(BaseModel):
    """Fields shared by every character write."""

    name: str = Field(min_length=1, max_length=NAME_MAX_LENGTH)
    description: str | None = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _strip_required(v, "Name")


class CharacterInSeriesCreate(CharacterBase):
    """Body for creating a character under a series given in the path."""


class CharacterWrite(CharacterBase):
    """Body for standalone character create/update."""

    series_id: int = Field(gt=0)


class SeriesCharacterItem(CharacterBase):
    """One entry of the desired character list in a series write.

    Entries with a positive ``id`` update (and, if needed, re-parent) that
    character; entries without one are inserted as new characters.
    """

    id: int | None = None


class CharacterResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None = None
    series_id: int
    series_title: str | None = None


# =============================================================================
# Series
# =============================================================================


class SeriesWrite(BaseModel):
    """Body for series create/update with its embedded character list.

    The character list is authoritative: on update, characters of the series
    that are not listed are deleted, and an absent list clears them all.
    """

    id: int | None = None
    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    genre: str = Field(min_length=1, max_length=GENRE_MAX_LENGTH)
    release_date: date
    characters: list[SeriesCharacterItem] | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _strip_required(v, "Title")

    @field_validator("genre")
    @classmethod
    def validate_genre(cls, v: str) -> str:
        return _strip_required(v, "Genre")


class SeriesResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    genre: str
    release_date: date
    characters: list[CharacterResponse] = Field(default_factory=list)


class SeriesStatsResponse(BaseModel):
    """Counts over the full series set at call time.

    ``unique_genres`` counts distinct genre strings case-sensitively.
    """

    total_series: int
    unique_genres: int


# =============================================================================
# Health
# =============================================================================


class HealthResponse(BaseModel):
    status: str
    service: str


class PoolStatusResponse(BaseModel):
    pool_size: int
    checked_out: int
    overflow: int
    checked_in: int


class CatalogCountsResponse(BaseModel):
    """Row counts reported by the detailed health check."""

    series: int
    characters: int


class DetailedHealthResponse(HealthResponse):
    database: bool
    pool: PoolStatusResponse | None = None
    catalog: CatalogCountsResponse | None = None
