"""Domain errors raised by the service layer.

Route handlers translate these into HTTP responses; services never import
FastAPI.
"""


class BookLoopError(Exception):
    """Base class for expected business-rule failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(BookLoopError):
    """A referenced user, book, circle, post, trade or notification is absent."""


class AlreadyMemberError(BookLoopError):
    """The user already belongs to the circle."""


class AlreadyExistsError(BookLoopError):
    """A unique value (e.g. an email address) is already taken."""


class InvalidRequestError(BookLoopError):
    """The request is well-formed but breaks a business rule."""
