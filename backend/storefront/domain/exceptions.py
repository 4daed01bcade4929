"""Domain-specific exceptions: framework-independent."""

from typing import Any


class UnknownEntityError(Exception):
    """Raised when an entity name is not declared in the registry.

    This is a configuration error in the caller, not a runtime condition
    to recover from.
    """

    def __init__(self, entity_name: str, known: list[str] | None = None):
        self.entity_name = entity_name
        self.known = known or []
        message = f"Unknown entity: '{entity_name}'"
        if self.known:
            message += f". Available entities: {', '.join(self.known)}"
        super().__init__(message)


class InvalidationGraphError(Exception):
    """Raised when the invalidation relationship table references unknown entities."""

    def __init__(self, source: str, target: str | None = None):
        self.source = source
        self.target = target
        if target is None:
            super().__init__(f"Invalidation graph declares unknown entity '{source}'")
        else:
            super().__init__(
                f"Invalidation graph edge '{source}' -> '{target}' targets an unknown entity"
            )


class RemoteDataSourceError(Exception):
    """Raised when the remote data source cannot satisfy a request.

    ``server_message`` holds the human-readable message the server sent, if
    any. ``status_code`` is None for transport failures.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        server_message: str | None = None,
        payload: Any = None,
    ):
        self.message = message
        self.status_code = status_code
        self.server_message = server_message
        self.payload = payload
        super().__init__(f"{status_code}: {message}" if status_code else message)


class RemoteTransportError(RemoteDataSourceError):
    """The request never reached the server or timed out."""


class RemoteValidationError(RemoteDataSourceError):
    """The server rejected the payload (400/422)."""


class RemoteAuthorizationError(RemoteDataSourceError):
    """The caller is unauthenticated (401) or forbidden (403)."""


class RemoteNotFoundError(RemoteDataSourceError):
    """The addressed resource or route does not exist (404)."""


class RemoteConflictError(RemoteDataSourceError):
    """The write conflicts with current business state (409), e.g. stock exhaustion."""


class RemoteServerError(RemoteDataSourceError):
    """Unexpected server-side failure (5xx)."""


class MutationError(Exception):
    """Raised by a mutation hook when its network write fails.

    The cache is left untouched. ``message`` is already normalized for
    display: the server-provided text when present, a generic one otherwise.
    """

    def __init__(self, operation: str, message: str, status_code: int | None = None):
        self.operation = operation
        self.message = message
        self.status_code = status_code
        super().__init__(message)

    @property
    def is_conflict(self) -> bool:
        return self.status_code == 409

    @property
    def is_authorization_error(self) -> bool:
        return self.status_code in (401, 403)
