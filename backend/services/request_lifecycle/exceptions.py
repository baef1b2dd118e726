"""Custom exceptions for item requests, seller profiles and seller responses."""


class RequestNotFoundError(Exception):
    """Raised when an item request cannot be found."""
    pass


class RequestNotEditableError(Exception):
    """Raised when a request is not in a state that allows the operation."""
    pass


class SellerProfileExistsError(Exception):
    """Raised when a user already owns a seller profile."""
    pass


class SellerProfileNotFoundError(Exception):
    """Raised when the user has no seller profile."""
    pass


class ResponseNotFoundError(Exception):
    """Raised when a seller response cannot be found."""
    pass


class ResponseForbiddenError(Exception):
    """Raised when the caller may not read or change a response."""
    pass


class ResponseNotAllowedError(Exception):
    """Raised when a response cannot be created or changed in its current state."""
    pass
