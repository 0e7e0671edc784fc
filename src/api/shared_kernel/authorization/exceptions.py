"""Exceptions for authorization operations.

None of these messages are meant for end users. The boundary translates every
AuthorizationError into an ordinary "forbidden" response.
"""


class AuthorizationError(Exception):
    """Base exception for authorization errors."""

    pass


class StoreUnavailableError(AuthorizationError):
    """Raised when a call to the relationship store fails.

    Covers connection failures, timeouts, and error responses. Failed checks
    are turned into denials by the evaluator; failed writes and deletes reach
    the caller.
    """

    pass


class ModelUnavailableError(AuthorizationError):
    """Raised when no authorization model can be resolved.

    The store could not provide a model version and no pinned fallback is
    configured. Callers must treat the outcome as deny.
    """

    pass


class InvalidModelError(AuthorizationError):
    """Raised when an authorization model is malformed.

    Examples are cyclic relation definitions, references to undefined
    relations or types, and types declaring more than one parent link.
    """

    pass


class UndefinedRelationError(AuthorizationError):
    """Raised when writing a fact whose relation the active model does not define.

    Evaluation never raises this; an undefined relation evaluates to deny.
    """

    pass
