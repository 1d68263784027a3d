"""Custom exception hierarchy for postman-remote.

Every terminal failure of credential resolution or remote fetching is
raised as a subclass of PostmanRemoteError. Each class carries a stable
ErrorKind, a human-readable message and an optional hint, so callers
(the CLI in particular) can map any of them to an exit status and print
a remediation line without inspecting the message text.

Exception Hierarchy:
    PostmanRemoteError (base)
    ├── ConfigurationError
    ├── ProfileStoreError
    │   └── AliasNotFoundError
    ├── CredentialError
    │   ├── NoAuthorizationDataError
    │   ├── InvalidInputError
    │   └── DecryptionError
    └── RemoteError
        ├── RemoteResourceNotFoundError
        ├── RemoteFetchError
        ├── InvalidResponseBodyError
        ├── RemoteAPIError
        └── ResourceLoadError

Example Usage:
    >>> from postman_remote.exceptions import PostmanRemoteError
    >>> try:
    ...     fetcher.fetch(ResourceKind.COLLECTION, location, context)
    ... except PostmanRemoteError as e:
    ...     print(e.kind, e.message, e.hint)
"""

from postman_remote.enums import ErrorKind

NO_AUTHORIZATION_DATA = "No authorization data found."
INVALID_INPUT = "Invalid input."
ERROR_DECRYPTION = "Error during decryption"
INCORRECT_KEY = "Make sure the key entered is correct."
REMOTE_RESOURCE_NOT_FOUND = "could not find the remote resource location"
ALIAS_NOT_FOUND = "Alias not found."


class PostmanRemoteError(Exception):
    """Base exception for all postman-remote errors.

    Attributes:
        message: Human-readable error description
        hint: Optional remediation hint shown to the user
        kind: Stable error category, one per subclass
    """

    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(self, message: str, hint: str | None = None) -> None:
        """Initialize exception.

        Args:
            message: Error message
            hint: Optional suggestion for resolution
        """
        self.message = message
        self.hint = hint
        super().__init__(message)


class ConfigurationError(PostmanRemoteError):
    """Settings could not be loaded or contain invalid values."""

    kind = ErrorKind.CONFIGURATION_ERROR


class ProfileStoreError(PostmanRemoteError):
    """The rc file holding the profiles could not be read or written."""

    kind = ErrorKind.PROFILE_STORE_ERROR


class AliasNotFoundError(ProfileStoreError):
    """No stored profile has the requested alias."""

    kind = ErrorKind.ALIAS_NOT_FOUND

    def __init__(self, alias: str, hint: str | None = None) -> None:
        self.alias = alias
        super().__init__(ALIAS_NOT_FOUND, hint=hint)


class CredentialError(PostmanRemoteError):
    """Base class for failures while resolving an API key.

    Subclasses:
    - NoAuthorizationDataError: No usable credential found
    - InvalidInputError: Empty interactive input
    - DecryptionError: Wrong passkey or corrupted ciphertext
    """


class NoAuthorizationDataError(CredentialError):
    """Neither an explicit key nor a matching profile is available."""

    kind = ErrorKind.NO_AUTHORIZATION_DATA

    def __init__(self, message: str = NO_AUTHORIZATION_DATA, hint: str | None = None) -> None:
        super().__init__(message, hint=hint)


class InvalidInputError(CredentialError):
    """The interactive passkey prompt returned nothing."""

    kind = ErrorKind.INVALID_INPUT

    def __init__(self, message: str = INVALID_INPUT, hint: str | None = None) -> None:
        super().__init__(message, hint=hint)


class DecryptionError(CredentialError):
    """The stored key could not be decrypted with the given passkey.

    The message is deliberately generic; the underlying cipher failure is
    never exposed.
    """

    kind = ErrorKind.DECRYPTION_ERROR

    def __init__(self, message: str = ERROR_DECRYPTION, hint: str | None = INCORRECT_KEY) -> None:
        super().__init__(message, hint=hint)


class RemoteError(PostmanRemoteError):
    """Base class for failures while locating or transferring a resource."""


class RemoteResourceNotFoundError(RemoteError):
    """The location is neither a Postman ID/UID nor an HTTP(S) URL."""

    kind = ErrorKind.REMOTE_RESOURCE_NOT_FOUND

    def __init__(self, message: str = REMOTE_RESOURCE_NOT_FOUND, hint: str | None = None) -> None:
        super().__init__(message, hint=hint)


class RemoteFetchError(RemoteError):
    """Network or transport failure talking to the remote host."""

    kind = ErrorKind.REMOTE_FETCH_ERROR


class InvalidResponseBodyError(RemoteError):
    """The response (or file) did not contain valid JSON data."""

    kind = ErrorKind.INVALID_RESPONSE_BODY


class ResourceLoadError(RemoteError):
    """A local resource file could not be read."""

    kind = ErrorKind.RESOURCE_LOAD_ERROR


class RemoteAPIError(RemoteError):
    """The remote host answered with a non-success status code.

    Attributes:
        status_code: HTTP status returned by the server
        resource: Human-readable resource label ("collection", "resource", ...)
        error_name: Error name reported by the server, or a synthesized one
    """

    kind = ErrorKind.REMOTE_API_ERROR

    def __init__(
        self,
        message: str,
        status_code: int,
        resource: str = "resource",
        error_name: str | None = None,
        hint: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.resource = resource
        self.error_name = error_name or f"{resource.capitalize()}FetchError"
        super().__init__(message, hint=hint)
