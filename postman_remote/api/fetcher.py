"""Authenticated fetch, update and listing of Postman resources over HTTP."""

from typing import Any

import httpx
import structlog

from postman_remote import __version__
from postman_remote.api.classifier import LocationClassifier, RequestTarget, redact_url
from postman_remote.config.settings import RemoteSettings
from postman_remote.credentials.models import ResolutionContext
from postman_remote.credentials.resolver import CredentialResolver
from postman_remote.enums import ResourceKind
from postman_remote.exceptions import (
    InvalidResponseBodyError,
    RemoteAPIError,
    RemoteFetchError,
)

log = structlog.get_logger(__name__)

USER_AGENT = f"postman-remote/{__version__}"
DEFAULT_HEADERS = {"User-Agent": USER_AGENT}
MAX_REDIRECTS = 20


class ResourceFetcher:
    """Fetch and update Postman collections and environments.

    Combines the LocationClassifier and the CredentialResolver: the location
    is classified, an API key is resolved only when the target needs one,
    and the response is mapped to the unwrapped resource or a typed error.
    Requests are never retried.

    Example:
        >>> with ResourceFetcher() as fetcher:
        ...     context = ResolutionContext(explicit_secret="PMAK-...")
        ...     collection = fetcher.fetch(ResourceKind.COLLECTION, "1234-931c1484-...", context)
    """

    def __init__(
        self,
        classifier: LocationClassifier | None = None,
        resolver: CredentialResolver | None = None,
        client: httpx.Client | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize resource fetcher.

        Args:
            classifier: Location classifier (default: public Postman API, header transport)
            resolver: Credential resolver (default: terminal passkey prompt)
            client: HTTP client to use. When omitted the fetcher creates and owns one.
            timeout: Timeout in seconds for the client the fetcher creates
        """
        self.classifier = classifier or LocationClassifier()
        self.resolver = resolver or CredentialResolver()
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    @classmethod
    def from_settings(
        cls,
        settings: RemoteSettings,
        resolver: CredentialResolver | None = None,
        client: httpx.Client | None = None,
    ) -> "ResourceFetcher":
        """Build a fetcher using the host, transport and timeout from ``settings``."""
        return cls(
            classifier=LocationClassifier(settings.api_host, settings.credential_transport),
            resolver=resolver,
            client=client,
            timeout=settings.timeout,
        )

    @property
    def client(self) -> httpx.Client:
        """Lazy initialization of the HTTP client."""
        if self._client is None:
            self._client = httpx.Client(timeout=self.timeout)
        return self._client

    def close(self) -> None:
        """Close the HTTP client if this fetcher created it."""
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> "ResourceFetcher":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def fetch(
        self,
        kind: ResourceKind,
        location: str,
        context: ResolutionContext | None = None,
    ) -> Any:
        """Get the resource at ``location``.

        Args:
            kind: Resource kind
            location: Postman ID, UID or HTTP(S) URL
            context: Credential resolution context, shared across one session

        Returns:
            The resource, unwrapped from the API envelope

        Raises:
            RemoteResourceNotFoundError: If the location is not an ID/UID or URL
            CredentialError: If an API key is needed but cannot be resolved
            RemoteFetchError: On transport failures
            InvalidResponseBodyError: If the body is not valid JSON
            RemoteAPIError: On a non-success status code
        """
        kind = ResourceKind(kind)
        target = self._target(kind, location, context)
        body = self._request("GET", target, operation="fetching")

        if isinstance(body, dict) and kind.envelope_key in body:
            return body[kind.envelope_key]
        return body

    def update(
        self,
        kind: ResourceKind,
        data: Any,
        location: str,
        context: ResolutionContext | None = None,
    ) -> None:
        """Replace the resource at ``location`` with ``data``.

        The payload is sent wrapped in the kind's envelope. Success is
        decided by the status code alone.

        Raises:
            Same as fetch()
        """
        kind = ResourceKind(kind)
        target = self._target(kind, location, context)
        self._request("PUT", target, operation="synchronizing", json_body={kind.envelope_key: data})

    def get_all(self, kind: ResourceKind, context: ResolutionContext | None = None) -> list[Any]:
        """List every resource of ``kind`` visible to the resolved API key.

        Raises:
            CredentialError: If no API key can be resolved
            InvalidResponseBodyError: If the listing is missing from the body
            RemoteFetchError, RemoteAPIError: As for fetch()
        """
        kind = ResourceKind(kind)
        api_key = self.resolver.resolve(context or ResolutionContext())
        target = self.classifier.authenticate(self.classifier.resource_url(kind), api_key)
        body = self._request("GET", target, operation="fetching")

        items = body.get(kind.path_segment) if isinstance(body, dict) else None
        if not isinstance(items, list):
            raise InvalidResponseBodyError(
                f"Response did not contain a list of {kind.path_segment}",
                hint=f'the url "{redact_url(target.url)}" did not provide a {kind} listing',
            )
        return items

    def _target(
        self,
        kind: ResourceKind,
        location: str,
        context: ResolutionContext | None,
    ) -> RequestTarget:
        classification = self.classifier.classify(kind, location)

        api_key = None
        if classification.needs_credential:
            api_key = self.resolver.resolve(context or ResolutionContext())

        return self.classifier.authenticate(classification.url, api_key)

    def _request(
        self,
        method: str,
        target: RequestTarget,
        operation: str,
        json_body: Any = None,
    ) -> Any:
        url = redact_url(target.url)
        headers = {**DEFAULT_HEADERS, **target.headers}
        if json_body is not None:
            headers["Content-Type"] = "application/json"

        log.info("remote_request", method=method, url=url)

        try:
            response = self._send(method, target, headers, json_body)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise RemoteFetchError(
                str(e) or type(e).__name__,
                hint=f'unable to fetch data from url "{url}"',
            ) from e

        log.debug("remote_response", method=method, url=url, status_code=response.status_code)

        if not response.is_success:
            raise self._api_error(response, target.url, operation)

        if method == "PUT":
            return None

        return self._parse_body(response, url)

    def _send(
        self,
        method: str,
        target: RequestTarget,
        headers: dict[str, str],
        json_body: Any,
    ) -> httpx.Response:
        """Send one request, following redirects by hand.

        The credential headers of ``target`` are only forwarded while the
        redirect chain stays on the API host.
        """
        response = self.client.request(method, target.url, headers=headers, json=json_body, follow_redirects=False)

        redirects = 0
        while response.next_request is not None:
            if redirects == MAX_REDIRECTS:
                raise httpx.TooManyRedirects("Exceeded maximum allowed redirects.", request=response.request)

            request = response.next_request
            if not self.classifier.is_api_url(str(request.url)):
                for name in target.headers:
                    request.headers.pop(name, None)

            log.debug(
                "remote_redirect",
                status_code=response.status_code,
                location=redact_url(str(request.url)),
            )
            response.close()
            response = self.client.send(request, follow_redirects=False)
            redirects += 1

        return response

    @staticmethod
    def _parse_body(response: httpx.Response, url: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise InvalidResponseBodyError(
                f"Invalid JSON in response body: {e}",
                hint=f'the url "{url}" did not provide valid JSON data',
            ) from e

    def _resource_label(self, url: str) -> str:
        """Singular resource name from an API URL path, "resource" elsewhere."""
        if not self.classifier.is_api_url(url):
            return "resource"

        segments = [segment for segment in httpx.URL(url).path.split("/") if segment]
        if not segments:
            return "resource"
        return segments[0][:-1] or "resource"

    def _api_error(self, response: httpx.Response, url: str, operation: str) -> RemoteAPIError:
        resource = self._resource_label(url)

        try:
            body = response.json()
        except ValueError:
            body = None

        error = body.get("error") if isinstance(body, dict) else None
        if not isinstance(error, dict):
            error = {}

        message = error.get("message") or (
            f"Error {operation} {resource}, the provided URL returned status code: {response.status_code}"
        )
        if operation == "synchronizing":
            hint = f"Error synchronizing the {resource} with the provided URL. Ensure that the URL is valid."
        else:
            hint = f"Error fetching the {resource} from the provided URL. Ensure that the URL is valid."

        log.warning(
            "remote_request_failed",
            url=redact_url(url),
            status_code=response.status_code,
            resource=resource,
        )

        return RemoteAPIError(
            str(message),
            status_code=response.status_code,
            resource=resource,
            error_name=error.get("name"),
            hint=hint,
        )
