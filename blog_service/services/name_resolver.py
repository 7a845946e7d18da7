"""
Name resolver: find-or-create for name-keyed records (Tag, Category).

Lookups are exact-match on ``name``.  New names go through
``insert_or_ignore`` and are then re-fetched, so two requests racing to
create the same name both end up with the single row that won; the unique
constraint on ``name`` is what settles the race.
"""
import logging
from typing import TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from blog_service.database import insert_or_ignore
from blog_service.models import Category, Tag

logger = logging.getLogger(__name__)

NamedModel = TypeVar("NamedModel", Tag, Category)


async def _find(db: AsyncSession, model: type[NamedModel], name: str) -> NamedModel | None:
    result = await db.execute(select(model).where(model.name == name))
    return result.scalar_one_or_none()


async def _create(db: AsyncSession, model: type[NamedModel], name: str) -> NamedModel:
    if not await insert_or_ignore(db, model, {"name": name}, ["name"]):
        logger.debug("%s %r created concurrently; re-fetching", model.__name__, name)

    record = await _find(db, model, name)
    if record is None:  # pragma: no cover - the insert above guarantees a row
        raise LookupError(f"{model.__name__} {name!r} vanished after insert")
    return record


async def resolve_names(
    db: AsyncSession, model: type[NamedModel], names: list[str]
) -> list[NamedModel]:
    """
    Return one *model* record per entry in *names*, in the same order,
    creating records for names that do not exist yet.

    Repeated names map to the same record each time they appear; the
    result is not de-duplicated.
    """
    records: list[NamedModel] = []
    for name in names:
        record = await _find(db, model, name)
        if record is None:
            record = await _create(db, model, name)
            logger.info("Created %s %r (id=%s)", model.__name__.lower(), name, record.id)
        records.append(record)
    return records


async def resolve_name_ids(
    db: AsyncSession, model: type[NamedModel], names: list[str]
) -> list[int]:
    """Like ``resolve_names`` but returns the identifiers only."""
    return [record.id for record in await resolve_names(db, model, names)]
