"""
Domain errors raised by the service layer.

Services raise these exceptions and endpoints translate them into HTTP
responses: ``NotFoundError`` becomes 404 and every
``LendingRuleError`` becomes 400 with the message as the reason.  They
derive from ``ValueError`` so callers that only care about "the request
was not acceptable" can keep catching that.
"""


class LibraryError(ValueError):
    """Base class for all domain errors."""


class NotFoundError(LibraryError):
    """An id does not resolve to an active book or reader."""

    def __init__(self, kind: str, entity_id) -> None:
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} {entity_id} not found")


class LendingRuleError(LibraryError):
    """A lend, return or update would break a lending invariant."""


class AlreadyLentError(LendingRuleError):
    def __init__(self, message: str = "Reader already has this book") -> None:
        super().__init__(message)


class NotLentError(LendingRuleError):
    def __init__(self, message: str = "Book is not attached to the reader") -> None:
        super().__init__(message)


class CapacityExceededError(LendingRuleError):
    def __init__(self, message: str = "Library has no available exemplars of this book") -> None:
        super().__init__(message)
