"""Process-wide LedgerApplicationService.

One instance per process so every request shares the same per-tenant locks.
"""

from src.re_ledger.application.service import LedgerApplicationService

_service = LedgerApplicationService()


def get_ledger_service() -> LedgerApplicationService:
    return _service
