"""Location classification and HTTP access to the Postman API."""

from postman_remote.api.classifier import (
    ID_REGEX,
    POSTMAN_API_HOST,
    Classification,
    LocationClassifier,
    RequestTarget,
    is_remote_location,
)
from postman_remote.api.fetcher import USER_AGENT, ResourceFetcher

__all__ = [
    "ID_REGEX",
    "POSTMAN_API_HOST",
    "USER_AGENT",
    "Classification",
    "LocationClassifier",
    "RequestTarget",
    "ResourceFetcher",
    "is_remote_location",
]
