"""Load JSON resources from the Postman API, any URL, or the local filesystem."""

import json
from pathlib import Path
from typing import Any

import structlog

from postman_remote.api.classifier import is_remote_location
from postman_remote.api.fetcher import ResourceFetcher
from postman_remote.credentials.models import ResolutionContext
from postman_remote.enums import ResourceKind
from postman_remote.exceptions import InvalidResponseBodyError, ResourceLoadError

log = structlog.get_logger(__name__)


def load_json(
    kind: ResourceKind,
    location: str,
    fetcher: ResourceFetcher,
    context: ResolutionContext | None = None,
) -> Any:
    """Load a resource of ``kind`` from ``location``.

    URLs and Postman IDs/UIDs go through ``fetcher``; anything else is read
    as a local JSON file. Resources saved from the API keep their envelope
    on disk, so a file holding ``{"collection": {...}}`` is unwrapped too.

    Raises:
        ResourceLoadError: If the local file cannot be read
        InvalidResponseBodyError: If the local file is not valid JSON
        PostmanRemoteError: Any error raised by the fetcher
    """
    kind = ResourceKind(kind)

    if is_remote_location(location):
        return fetcher.fetch(kind, location, context)

    path = Path(location)
    log.debug("loading_local_resource", kind=str(kind), path=str(path))

    try:
        content = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise ResourceLoadError(str(e), hint=f'unable to read data from file "{location}"') from e

    try:
        data = json.loads(content.strip())
    except json.JSONDecodeError as e:
        raise InvalidResponseBodyError(
            str(e), hint=f'the file at "{location}" does not contain valid JSON data'
        ) from e

    if isinstance(data, dict) and isinstance(data.get(kind.envelope_key), dict):
        return data[kind.envelope_key]
    return data
