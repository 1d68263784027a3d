"""Pytest configuration and shared fixtures."""

from collections.abc import Callable
from unittest.mock import Mock

import httpx
import pytest
import structlog

from postman_remote.api.classifier import LocationClassifier
from postman_remote.api.fetcher import ResourceFetcher
from postman_remote.credentials import codec
from postman_remote.credentials.models import Profile, ResolutionContext
from postman_remote.credentials.resolver import CredentialResolver
from postman_remote.enums import CredentialTransport

PLAIN_API_KEY = "PMAK-plain-0123456789"
SECRET_API_KEY = "PMAK-secret-9876543210"
PASSKEY = "p@s$key"

SAMPLE_POSTMAN_ID = "931c1484-fd1e-4ceb-81d0-2aa102ca8b5f"
SAMPLE_POSTMAN_UID = "1234-931c1484-fd1e-4ceb-81d0-2aa102ca8b5f"
SAMPLE_ENVIRONMENT_ID = "588025f9-2497-46f7-b849-47f58b865807"

COLLECTION = {
    "info": {"_postman_id": "C1", "name": "Collection"},
    "item": [{"id": "ID1", "name": "R1", "request": "https://postman-echo.com/get"}],
}
ENVIRONMENT = {"id": "E1", "name": "Environment", "values": [{"key": "foo", "value": "bar"}]}


@pytest.fixture(autouse=True)
def reset_structlog():
    """CLI invocations reconfigure structlog; restore defaults after each test."""
    yield
    structlog.reset_defaults()


@pytest.fixture(scope="session")
def encrypted_secret() -> str:
    """SECRET_API_KEY encrypted with PASSKEY (computed once, key derivation is slow)."""
    return codec.encrypt(SECRET_API_KEY, PASSKEY)


@pytest.fixture
def plain_profile() -> Profile:
    return Profile(alias="default", secret=codec.encode(PLAIN_API_KEY), encrypted=False)


@pytest.fixture
def encrypted_profile(encrypted_secret: str) -> Profile:
    return Profile(alias="secure", secret=encrypted_secret, encrypted=True)


@pytest.fixture
def profiles(plain_profile: Profile, encrypted_profile: Profile) -> list[Profile]:
    return [plain_profile, encrypted_profile]


@pytest.fixture
def mock_prompt() -> Mock:
    """PasskeyPrompt stand-in answering with the correct passkey."""
    prompt = Mock()
    prompt.prompt_hidden.return_value = PASSKEY
    return prompt


@pytest.fixture
def resolver(mock_prompt: Mock) -> CredentialResolver:
    return CredentialResolver(prompt=mock_prompt)


@pytest.fixture
def plain_context(profiles: list[Profile]) -> ResolutionContext:
    return ResolutionContext(alias="default", profiles=profiles)


@pytest.fixture
def make_fetcher(resolver: CredentialResolver) -> Callable[..., ResourceFetcher]:
    """Build a ResourceFetcher whose HTTP traffic goes to ``handler``."""

    def factory(
        handler: Callable[[httpx.Request], httpx.Response],
        transport: CredentialTransport = CredentialTransport.HEADER,
        credential_resolver: CredentialResolver | None = None,
    ) -> ResourceFetcher:
        return ResourceFetcher(
            classifier=LocationClassifier(transport=transport),
            resolver=credential_resolver or resolver,
            client=httpx.Client(transport=httpx.MockTransport(handler)),
        )

    return factory
