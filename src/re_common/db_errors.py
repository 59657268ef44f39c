"""Map driver-level failures onto the ledger error taxonomy."""

from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from src.re_common.errors import AppError, ConcurrencyConflictError, PersistenceFailureError

# lock_not_available, serialization_failure, deadlock_detected
_CONFLICT_SQLSTATES = frozenset({"55P03", "40001", "40P01"})


def _sqlstate(exc: DBAPIError) -> str | None:
    orig = exc.orig
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def translate_db_error(exc: SQLAlchemyError, tenant_id: str) -> AppError:
    if isinstance(exc, DBAPIError) and _sqlstate(exc) in _CONFLICT_SQLSTATES:
        return ConcurrencyConflictError(tenant_id)
    return PersistenceFailureError(f"Storage failure: {exc.__class__.__name__}")
