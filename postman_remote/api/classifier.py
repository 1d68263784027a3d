"""Classification of resource locations into request targets."""

import re
from dataclasses import dataclass, field

import httpx

from postman_remote.enums import CredentialTransport, LocationType, ResourceKind
from postman_remote.exceptions import RemoteResourceNotFoundError

POSTMAN_API_HOST = "api.getpostman.com"
API_KEY_HEADER = "X-Api-Key"
API_KEY_PARAM = "apikey"

# Postman ID or UID (owner-prefixed ID), case insensitive.
ID_REGEX = re.compile(
    r"^([0-9A-Z]+-)?[0-9A-F]{8}-[0-9A-F]{4}-[0-9A-F]{4}-[0-9A-F]{4}-[0-9A-F]{12}\Z",
    re.IGNORECASE,
)
URL_REGEX = re.compile(r"^https?://", re.IGNORECASE)
API_KEY_QUERY_REGEX = re.compile(r"[?&]apikey=")
_API_KEY_VALUE = re.compile(r"([?&]apikey=)[^&#]*")


def redact_url(url: str) -> str:
    """Mask the value of an ``apikey`` query parameter."""
    return _API_KEY_VALUE.sub(r"\1***", url)


def is_remote_location(location: str) -> bool:
    """Whether ``location`` is an HTTP(S) URL or a Postman ID/UID."""
    return bool(URL_REGEX.match(location) or ID_REGEX.match(location))


@dataclass(frozen=True)
class Classification:
    """Where a resource lives and whether fetching it needs an API key."""

    kind: ResourceKind
    url: str
    location_type: LocationType

    @property
    def needs_credential(self) -> bool:
        return self.location_type in (LocationType.IDENTIFIER, LocationType.API_URL)


@dataclass(frozen=True)
class RequestTarget:
    """Final URL and authentication headers for one request."""

    url: str
    headers: dict[str, str] = field(default_factory=dict)


class LocationClassifier:
    """Decide how a location string maps onto the Postman API.

    Example:
        >>> classifier = LocationClassifier()
        >>> classifier.classify(ResourceKind.COLLECTION, "931c1484-fd1e-4ceb-81d0-2aa102ca8b5f").url
        'https://api.getpostman.com/collections/931c1484-fd1e-4ceb-81d0-2aa102ca8b5f'
    """

    def __init__(
        self,
        api_host: str = POSTMAN_API_HOST,
        transport: CredentialTransport = CredentialTransport.HEADER,
    ) -> None:
        self.api_host = api_host
        self.transport = CredentialTransport(transport)
        self._api = httpx.URL(self.api_url)

    @property
    def api_url(self) -> str:
        return f"https://{self.api_host}"

    def resource_url(self, kind: ResourceKind, identifier: str | None = None) -> str:
        """API URL of one resource, or of the listing when no identifier is given."""
        url = f"{self.api_url}/{kind.path_segment}"
        return f"{url}/{identifier}" if identifier else url

    def is_api_url(self, url: str) -> bool:
        """Whether ``url`` points at the API host, port included."""
        parsed = httpx.URL(url)
        return parsed.host == self._api.host and parsed.port == self._api.port

    def classify(self, kind: ResourceKind, location: str) -> Classification:
        """Classify ``location`` for a resource of type ``kind``.

        Args:
            kind: Resource kind, selecting the API path segment
            location: Postman ID, UID or HTTP(S) URL

        Returns:
            The classification, with the synthesized URL for identifiers

        Raises:
            RemoteResourceNotFoundError: If location is neither an ID/UID nor a URL
        """
        kind = ResourceKind(kind)

        if ID_REGEX.match(location):
            return Classification(kind, self.resource_url(kind, location), LocationType.IDENTIFIER)

        if not URL_REGEX.match(location):
            raise RemoteResourceNotFoundError(
                hint=f'"{location}" is neither a Postman ID/UID nor an HTTP(S) URL'
            )

        try:
            on_api_host = self.is_api_url(location)
        except httpx.InvalidURL as e:
            raise RemoteResourceNotFoundError(hint=f'"{redact_url(location)}" is not a valid URL') from e

        if API_KEY_QUERY_REGEX.search(location):
            return Classification(kind, location, LocationType.AUTHENTICATED_URL)

        if not on_api_host:
            return Classification(kind, location, LocationType.FOREIGN_URL)

        return Classification(kind, location, LocationType.API_URL)

    def authenticate(self, url: str, api_key: str | None) -> RequestTarget:
        """Attach ``api_key`` to ``url`` using the configured transport.

        A URL that already carries an ``apikey`` parameter is returned as is.
        """
        if not api_key or API_KEY_QUERY_REGEX.search(url):
            return RequestTarget(url)

        if self.transport == CredentialTransport.QUERY:
            return RequestTarget(str(httpx.URL(url).copy_merge_params({API_KEY_PARAM: api_key})))

        return RequestTarget(url, {API_KEY_HEADER: api_key})
