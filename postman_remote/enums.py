"""Enumerations for postman-remote resource kinds and error categories."""

from enum import Enum


class ResourceKind(str, Enum):
    """Types of Postman cloud resources that can be fetched.

    Each kind maps to a fixed API path segment and to the key the API
    wraps the payload under.
    """

    COLLECTION = "collection"
    ENVIRONMENT = "environment"

    def __str__(self) -> str:
        return self.value

    @property
    def path_segment(self) -> str:
        """API path segment, also the key of listing responses."""
        return _PATH_SEGMENTS[self]

    @property
    def envelope_key(self) -> str:
        """Key a single resource is nested under in API bodies."""
        return self.value


_PATH_SEGMENTS: dict[ResourceKind, str] = {
    ResourceKind.COLLECTION: "collections",
    ResourceKind.ENVIRONMENT: "environments",
}


class CredentialTransport(str, Enum):
    """How a resolved API key is attached to a request.

    HEADER sends ``X-Api-Key``; QUERY appends ``apikey=`` to the URL and
    only exists for compatibility with older tooling.
    """

    HEADER = "header"
    QUERY = "query"

    def __str__(self) -> str:
        return self.value


class LocationType(str, Enum):
    """Result of classifying a resource location.

    IDENTIFIER and API_URL need an API key; AUTHENTICATED_URL already
    carries one and FOREIGN_URL points away from the Postman API.
    """

    IDENTIFIER = "identifier"
    API_URL = "api_url"
    AUTHENTICATED_URL = "authenticated_url"
    FOREIGN_URL = "foreign_url"

    def __str__(self) -> str:
        return self.value


class ErrorKind(str, Enum):
    """Stable categories for every terminal failure."""

    UNKNOWN = "unknown"
    CONFIGURATION_ERROR = "configuration_error"
    PROFILE_STORE_ERROR = "profile_store_error"
    ALIAS_NOT_FOUND = "alias_not_found"
    NO_AUTHORIZATION_DATA = "no_authorization_data"
    INVALID_INPUT = "invalid_input"
    DECRYPTION_ERROR = "decryption_error"
    REMOTE_RESOURCE_NOT_FOUND = "remote_resource_not_found"
    REMOTE_FETCH_ERROR = "remote_fetch_error"
    INVALID_RESPONSE_BODY = "invalid_response_body"
    REMOTE_API_ERROR = "remote_api_error"
    RESOURCE_LOAD_ERROR = "resource_load_error"

    def __str__(self) -> str:
        return self.value
