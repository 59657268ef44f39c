"""Property directory Protocol: the ledger reads properties, never writes them.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.re_property.domain.models import Property


def normalize_property_code(code: str) -> str:
    """Codes are stored upper-case; accept whatever the tenant typed."""
    return code.strip().upper()


class PropertyDirectoryProtocol(Protocol):
    async def get_by_id(
        self, db: AsyncSession, property_id: str
    ) -> Property | None: ...

    async def get_by_code(
        self, db: AsyncSession, property_code: str
    ) -> Property | None: ...
