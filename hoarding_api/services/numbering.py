"""Human-readable record numbers backed by per-tag, per-year counters.

The counter row is bumped with a single ``UPDATE ... SET value = value + 1``
inside the caller's transaction, so concurrent writers serialize on the row
instead of reading the latest record and computing the next number.
"""
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from hoarding_api.models.counter import Counter
from hoarding_api.utils.dates import utcnow

HOARDING_TAG = "H"
CONTRACT_TAG = "CON"
INVOICE_TAG = "INV"


async def next_sequence(db: AsyncSession, key: str) -> int:
    result = await db.execute(
        update(Counter).where(Counter.key == key).values(value=Counter.value + 1)
    )
    if result.rowcount == 0:
        # First number for this key. A concurrent first insert fails on the
        # primary key and surfaces as an IntegrityError (409).
        db.add(Counter(key=key, value=1))
        await db.flush()
        return 1

    value = await db.execute(select(Counter.value).where(Counter.key == key))
    return value.scalar_one()


def format_number(tag: str, year: int, sequence: int) -> str:
    return f"{tag}-{year}-{sequence:04d}"


async def next_number(db: AsyncSession, tag: str) -> str:
    year = utcnow().year
    sequence = await next_sequence(db, f"{tag}-{year}")
    return format_number(tag, year, sequence)
