"""Custom exception classes and handlers."""

from fastapi import FastAPI, status
from fastapi.responses import JSONResponse


class BusinessLogicError(Exception):
    """Raised for domain-specific validation errors."""

    code = "business_error"

    def __init__(self, detail: str, status_code: int = 422):
        self.detail = detail
        self.status_code = status_code
        super().__init__(detail)


class PaymentError(BusinessLogicError):
    """Base class for every error raised by the payment core."""

    code = "payment_error"
    default_status = 422

    def __init__(self, detail: str):
        super().__init__(detail, status_code=self.default_status)


class MissingPixIdentity(PaymentError):
    """No usable PIX key/holder is configured for the workspace."""

    code = "missing_pix_identity"


class InvalidChargeConfiguration(PaymentError):
    """The pricing policy requires payment but cannot yield a positive amount."""

    code = "invalid_charge_configuration"


class PaymentNotFound(PaymentError):
    code = "payment_not_found"
    default_status = status.HTTP_404_NOT_FOUND


class InvalidStateTransition(PaymentError):
    """A transition was attempted from a terminal or mismatched state."""

    code = "invalid_state_transition"
    default_status = status.HTTP_409_CONFLICT

    def __init__(self, current: str, attempted: str, entity: str = "payment"):
        self.entity = entity
        self.current = str(current)
        self.attempted = str(attempted)
        super().__init__(f"Cannot move {entity} from '{self.current}' to '{self.attempted}'")


class ConcurrentModification(PaymentError):
    """Optimistic claim lost to another writer; safe to retry."""

    code = "concurrent_modification"
    default_status = status.HTTP_409_CONFLICT


def register_exception_handlers(app: FastAPI) -> None:
    """Attach shared exception handlers to the FastAPI app."""

    @app.exception_handler(BusinessLogicError)
    async def _business_error_handler(_: FastAPI, exc: BusinessLogicError):
        return JSONResponse(
            {"success": False, "message": exc.detail, "code": exc.code},
            status_code=exc.status_code,
        )
