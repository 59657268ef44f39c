"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Identity
  2xxx: Ledger
  3xxx: Property directory
  9xxx: System / persistence
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Identity ---

class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Invalid or expired token", 401)


class RoleForbiddenError(AppError):
    def __init__(self, required_role: str) -> None:
        super().__init__(1002, f"{required_role} role required", 403)


# --- 2xxx: Ledger ---

class NotLinkedError(AppError):
    def __init__(self, tenant_id: str) -> None:
        super().__init__(2001, f"Tenant {tenant_id} is not linked to a property", 404)


class AlreadyLinkedError(AppError):
    def __init__(self, tenant_id: str, property_id: str) -> None:
        super().__init__(
            2002,
            f"Tenant {tenant_id} is already linked to property {property_id}",
            409,
        )


# --- 3xxx: Property directory ---

class InvalidCodeError(AppError):
    def __init__(self, code: str) -> None:
        super().__init__(3001, f"Invalid Property Code: {code}", 404)


class PropertyNotFoundError(AppError):
    def __init__(self, property_id: str) -> None:
        super().__init__(3002, f"Property not found: {property_id}", 404)


class NotPropertyOwnerError(AppError):
    def __init__(self, property_id: str) -> None:
        super().__init__(3003, f"Not the owner of property {property_id}", 403)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class ConcurrencyConflictError(AppError):
    """Exclusive access to a tenant ledger could not be obtained. Nothing was written."""

    def __init__(self, tenant_id: str) -> None:
        super().__init__(
            9003,
            f"Ledger for tenant {tenant_id} is busy, try again",
            409,
        )


class PersistenceFailureError(AppError):
    def __init__(self, detail: str = "Storage failure") -> None:
        super().__init__(9004, detail, 500)
