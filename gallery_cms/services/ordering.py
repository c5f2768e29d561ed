"""
Helpers that keep display_order columns dense and zero-based.
None of them commit; callers commit once so each batch is atomic.
"""
from typing import Iterable, List

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from gallery_cms.errors import NotFoundError


async def next_display_order(db: AsyncSession, model, *criteria) -> int:
    """Position just after the last row matching criteria (0 for an empty scope)."""
    result = await db.execute(select(func.max(model.display_order)).where(*criteria))
    current_max = result.scalar()
    return 0 if current_max is None else current_max + 1


async def _ordered_ids(db: AsyncSession, model, *criteria) -> List[int]:
    result = await db.execute(
        select(model.id).where(*criteria).order_by(model.display_order.asc(), model.id.asc())
    )
    return list(result.scalars().all())


async def _write_positions(db: AsyncSession, model, ordered_ids: Iterable[int]) -> None:
    for position, row_id in enumerate(ordered_ids):
        await db.execute(
            update(model)
            .where(model.id == row_id)
            .values(display_order=position)
        )


async def apply_order(db: AsyncSession, model, ids: List[int], *criteria) -> None:
    """
    Give the listed rows positions 0..n-1 in the order provided.
    Rows in scope that were not listed follow in their current relative order.

    Raises:
        NotFoundError: If any listed id is not in scope
    """
    scope_ids = await _ordered_ids(db, model, *criteria)
    in_scope = set(scope_ids)
    missing = [row_id for row_id in ids if row_id not in in_scope]
    if missing:
        raise NotFoundError(f"{model.__name__} IDs not found: {missing}")

    listed = set(ids)
    final_order = list(ids) + [row_id for row_id in scope_ids if row_id not in listed]
    await _write_positions(db, model, final_order)


async def compact(db: AsyncSession, model, *criteria) -> None:
    """Close gaps left by deleted or moved rows."""
    await _write_positions(db, model, await _ordered_ids(db, model, *criteria))
