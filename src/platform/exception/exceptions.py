class CustomBaseError(Exception):
    """Base class for all custom exceptions - controls logging behavior in @Logger.io"""

    def __init__(self, message: str, status_code: int) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class DomainError(CustomBaseError):
    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message, status_code)


class PreconditionFailure(DomainError):
    """Required context is missing; never attempted over the network."""

    def __init__(self, message: str) -> None:
        super().__init__(message, 412)


class ValidationFailure(DomainError):
    """Passenger or contact data is incomplete; caught before any network call."""

    def __init__(self, message: str) -> None:
        super().__init__(message, 422)


class HoldLost(PreconditionFailure):
    """No live hold covers the selection at submit time; the flow returns to seat selection."""


class InvalidTransition(DomainError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 409)


class SeatRestricted(DomainError):
    """User-facing restriction notice for exit-row / extra-legroom seats."""

    def __init__(self, message: str, *, seat_id: str) -> None:
        self.seat_id = seat_id
        super().__init__(message, 403)


class CouponRejected(DomainError):
    def __init__(self, message: str, *, reason: str) -> None:
        self.reason = reason
        super().__init__(message, 400)


class InventoryUnavailable(CustomBaseError):
    """No seat map exists for the flight. Terminal for this flight."""

    def __init__(self, message: str) -> None:
        super().__init__(message, 404)


class HoldFailed(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 409)


class HoldExpired(CustomBaseError):
    def __init__(self, message: str = 'Seat hold expired. Please choose your seats again.') -> None:
        super().__init__(message, 410)


class PriceMismatch(CustomBaseError):
    def __init__(
        self,
        message: str,
        *,
        server_computed: int | None = None,
        client_computed: int | None = None,
    ) -> None:
        self.server_computed = server_computed
        self.client_computed = client_computed
        super().__init__(message, 409)


class SubmissionFailed(CustomBaseError):
    def __init__(self, message: str, status_code: int = 502) -> None:
        super().__init__(message, status_code)


class RemoteServiceError(CustomBaseError):
    """Transient failure talking to the booking service (network, 5xx)."""

    def __init__(self, message: str, status_code: int = 503) -> None:
        super().__init__(message, status_code)


class IdempotencyKeyConflict(CustomBaseError):
    """A key was about to be sent with a price breakdown it was not issued for."""

    def __init__(self, message: str) -> None:
        super().__init__(message, 500)
