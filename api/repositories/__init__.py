"""Repository layer for database operations.

Repositories encapsulate all database queries, keeping services focused on
business rules and routes focused on HTTP handling. Repositories never
commit; the request-scoped session owns the transaction.
"""

from repositories.character_repository import CharacterRepository
from repositories.series_repository import SeriesRepository
from repositories.utils import log_slow_query

__all__ = [
    "CharacterRepository",
    "SeriesRepository",
    "log_slow_query",
]
