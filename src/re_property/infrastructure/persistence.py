"""PropertyDirectory: read-only implementation of PropertyDirectoryProtocol.

Properties are registered by the property-management service; this module only
resolves them by id or shareable code.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.re_property.domain.models import Property
from src.re_property.domain.repository import normalize_property_code
from src.re_property.infrastructure.db_models import PropertyORM


def _to_domain(row: PropertyORM) -> Property:
    return Property(
        id=row.id,
        owner_id=row.owner_id,
        name=row.name,
        address=row.address,
        rent_amount=row.rent_amount,
        security_deposit=row.security_deposit,
        due_date=row.due_date,
        owner_payout_id=row.owner_payout_id,
        property_code=row.property_code,
        created_at=row.created_at,
    )


class PropertyDirectory:
    """Stateless directory: instantiate once, reuse across requests."""

    async def get_by_id(
        self, db: AsyncSession, property_id: str
    ) -> Property | None:
        result = await db.execute(select(PropertyORM).where(PropertyORM.id == property_id))
        row = result.scalar_one_or_none()
        return _to_domain(row) if row is not None else None

    async def get_by_code(
        self, db: AsyncSession, property_code: str
    ) -> Property | None:
        code = normalize_property_code(property_code)
        result = await db.execute(
            select(PropertyORM).where(PropertyORM.property_code == code)
        )
        row = result.scalar_one_or_none()
        return _to_domain(row) if row is not None else None
