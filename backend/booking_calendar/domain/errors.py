class DomainError(Exception):
    """Base class for booking domain failures. The message is shown to callers."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(DomainError):
    pass


class ResourceNotFoundError(NotFoundError):
    pass


class BookingNotFoundError(NotFoundError):
    pass


class InvalidInputError(DomainError):
    pass


class InvalidSlotError(InvalidInputError):
    pass


class InvalidBookingConfigError(InvalidInputError):
    pass


class PastSlotError(InvalidInputError):
    pass


class SlotConflictError(DomainError):
    """The slot already holds a confirmed booking. Pick another slot."""


class ResourceAlreadyExistsError(DomainError):
    pass


class ForbiddenError(DomainError):
    pass


class NotOwnerError(ForbiddenError):
    pass
