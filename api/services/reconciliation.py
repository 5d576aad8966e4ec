"""Reconciliation of a series' persisted characters against a desired list.

A series write carries the complete list of characters the series should own
afterwards. Reconciliation turns that list plus the currently persisted set
into inserts, updates and deletions:

- entries with a positive id update that character, taking it over from
  whichever series owned it before;
- entries without one (or with id <= 0) become new characters;
- owned characters whose id is not listed are deleted.

Planning is pure and validates everything up front (missing ids, duplicate
ids, name collisions in the final state), so a rejected request never reaches
the store. Applying the plan only flushes; the request session commits or
rolls back the whole write.
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from core.logger import get_logger
from core.wide_event import set_wide_event_nested
from models import Character, fold_case
from repositories.character_repository import CharacterRepository
from services.errors import (
    ConflictError,
    InvalidArgumentError,
    NotFoundError,
    flush_or_conflict,
)

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class CharacterSpec:
    """Desired state of one character in a series write."""

    name: str
    description: str | None = None
    id: int | None = None

    @property
    def references_existing(self) -> bool:
        return self.id is not None and self.id > 0


@dataclass(slots=True)
class ReconciliationPlan:
    updates: list[tuple[Character, CharacterSpec]] = field(default_factory=list)
    inserts: list[CharacterSpec] = field(default_factory=list)
    removals: list[Character] = field(default_factory=list)


def _find_duplicate_names(specs: Iterable[CharacterSpec]) -> list[str]:
    seen: set[str] = set()
    duplicates: list[str] = []
    for spec in specs:
        key = fold_case(spec.name)
        if key in seen and key not in duplicates:
            duplicates.append(key)
        seen.add(key)
    return duplicates


def plan_reconciliation(
    current: Sequence[Character],
    desired: Sequence[CharacterSpec],
    existing: Mapping[int, Character],
) -> ReconciliationPlan:
    """Build the insert/update/delete plan for one series.

    Args:
        current: Characters the series owns right now.
        desired: The complete character list the series should own afterwards.
        existing: Persisted characters for every id referenced in ``desired``,
            keyed by id, wherever they currently belong.

    Raises:
        InvalidArgumentError: The same id is listed more than once.
        NotFoundError: A listed id has no persisted character.
        ConflictError: Two desired entries share a name (case-insensitively).
    """
    plan = ReconciliationPlan()
    listed_ids: set[int] = set()

    for spec in desired:
        if not spec.references_existing:
            plan.inserts.append(spec)
            continue

        if spec.id in listed_ids:
            raise InvalidArgumentError(f"Character {spec.id} is listed more than once")
        listed_ids.add(spec.id)

        character = existing.get(spec.id)
        if character is None:
            raise NotFoundError(f"Referenced character {spec.id} does not exist")
        plan.updates.append((character, spec))

    # Evaluated on the final state, so swapping two names in one request is fine
    duplicates = _find_duplicate_names(desired)
    if duplicates:
        raise ConflictError(
            "Character names must be unique within a series: "
            + ", ".join(sorted(duplicates))
        )

    plan.removals = [c for c in current if c.id not in listed_ids]
    return plan


async def reconcile_characters(
    db: AsyncSession, series_id: int, desired: Sequence[CharacterSpec]
) -> list[Character]:
    """Make ``desired`` the exact character set of a series.

    Returns the resulting characters in the order they were listed, with ids
    assigned. Raises before any write if the plan is rejected.
    """
    repo = CharacterRepository(db)

    referenced_ids = {spec.id for spec in desired if spec.references_existing}
    locked = await repo.lock_for_reconciliation(series_id, list(referenced_ids))
    current = [c for c in locked if c.series_id == series_id]
    existing = {c.id: c for c in locked if c.id in referenced_ids}

    plan = plan_reconciliation(current, desired, existing)

    # Removals go first so a new character may reuse a removed one's name
    await repo.delete_many([c.id for c in plan.removals])

    updated = {spec.id: character for character, spec in plan.updates}
    resulting: list[Character] = []
    for spec in desired:
        if spec.references_existing:
            character = updated[spec.id]
            await repo.update(
                character,
                name=spec.name,
                description=spec.description,
                series_id=series_id,
            )
        else:
            character = await repo.create(
                name=spec.name, description=spec.description, series_id=series_id
            )
        resulting.append(character)

    await flush_or_conflict(
        db, f"Characters of series {series_id} were modified concurrently"
    )

    current_ids = {c.id for c in current}
    reparented = sum(1 for c, _ in plan.updates if c.id not in current_ids)
    logger.info(
        "characters.reconciled",
        series_id=series_id,
        inserted=len(plan.inserts),
        updated=len(plan.updates),
        removed=len(plan.removals),
        reparented=reparented,
    )
    set_wide_event_nested(
        "reconciliation",
        inserted=len(plan.inserts),
        updated=len(plan.updates),
        removed=len(plan.removals),
    )
    return resulting
