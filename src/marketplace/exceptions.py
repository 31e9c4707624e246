"""Exceptions raised by the marketplace that Protean does not model."""


class AuthorizationError(Exception):
    """The caller lacks the role or ownership an operation requires."""

    def __init__(self, message="Not authorized"):
        super().__init__(message)
        self.message = message
