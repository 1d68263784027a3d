"""Newman-compatible rc file storage for API-key profiles.

Profiles live in a JSON rc file under ``login._profiles``::

    {
      "login": {
        "_profiles": [
          {"alias": "default", "postmanApiKey": "<encoded>", "encrypted": false}
        ]
      }
    }

Two files are consulted:
- home rc file, ``~/.postman/newmanrc`` (default target for writes)
- project rc file, ``./.newmanrc`` (overrides the home file when loaded)

Files are written atomically with permissions 600 inside a 700 directory.
"""

import copy
import json
import os
from pathlib import Path
from typing import Any, Literal

import structlog
from pydantic import ValidationError

from postman_remote.credentials.models import Profile
from postman_remote.exceptions import AliasNotFoundError, ProfileStoreError

log = structlog.get_logger(__name__)

HOME_RC_FILE = Path("~/.postman/newmanrc")
PROJECT_RC_FILE = Path(".newmanrc")

RcTarget = Literal["home", "project"]


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep-merge ``override`` into a copy of ``base``.

    Profile lists are merged by alias: an override profile replaces the base
    profile with the same alias in place, new aliases are appended.
    """
    merged = copy.deepcopy(base)

    for key, value in override.items():
        if key == "_profiles" and isinstance(value, list) and isinstance(merged.get(key), list):
            profiles = merged[key]
            positions = {p.get("alias"): i for i, p in enumerate(profiles) if isinstance(p, dict)}
            for profile in value:
                alias = profile.get("alias") if isinstance(profile, dict) else None
                if alias in positions:
                    profiles[positions[alias]] = copy.deepcopy(profile)
                else:
                    profiles.append(copy.deepcopy(profile))
        elif isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)

    return merged


def _raw_profiles(data: dict[str, Any]) -> list[dict[str, Any]]:
    """Return the ``login._profiles`` list of ``data`` itself, not a copy.

    Raises:
        ProfileStoreError: If ``login`` or ``_profiles`` has the wrong shape
    """
    login = data.get("login")
    if login is None:
        return []
    if not isinstance(login, dict):
        raise ProfileStoreError(
            "The rc file contains invalid data.",
            hint='"login" must be a JSON object',
        )

    profiles = login.get("_profiles")
    if profiles is None:
        return []
    if not isinstance(profiles, list) or not all(isinstance(p, dict) for p in profiles):
        raise ProfileStoreError(
            "The rc file contains invalid data.",
            hint='"login._profiles" must be a list of JSON objects',
        )
    return profiles


class ProfileStore:
    """Read and write the rc files holding API-key profiles.

    Example:
        >>> store = ProfileStore()
        >>> data = store.load()
        >>> store.profiles(data)
        [Profile(alias='default', ...)]
        >>> store.store(ProfileStore.add_profile(data, profile))
    """

    def __init__(self, home_file: Path | None = None, project_file: Path | None = None) -> None:
        """Initialize profile store.

        Args:
            home_file: Home rc file path (default ~/.postman/newmanrc)
            project_file: Project rc file path (default ./.newmanrc)
        """
        self.home_file = (home_file or HOME_RC_FILE).expanduser()
        self.project_file = (project_file or PROJECT_RC_FILE).expanduser()

    def _path_for(self, target: RcTarget) -> Path:
        return self.project_file if target == "project" else self.home_file

    @staticmethod
    def _read(path: Path) -> dict[str, Any]:
        if not path.exists():
            return {}

        try:
            content = path.read_text(encoding="utf-8-sig")
        except OSError as e:
            raise ProfileStoreError(
                f"Unable to read the rc file at {path}",
                hint="Check the file permissions",
            ) from e

        if not content.strip():
            return {}

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ProfileStoreError(
                f"The rc file at {path} contains invalid data.",
                hint="Fix the JSON syntax or delete the file",
            ) from e

        if not isinstance(data, dict):
            raise ProfileStoreError(
                f"The rc file at {path} contains invalid data.",
                hint="The rc file must contain a JSON object",
            )

        return data

    def load(self, home: bool = True, project: bool = False) -> dict[str, Any]:
        """Load rc data, the project file taking priority over the home file.

        Args:
            home: Read the home rc file
            project: Read the project rc file

        Returns:
            Merged rc data, ``{}`` when no file exists

        Raises:
            ProfileStoreError: If a file is unreadable or not a JSON object
        """
        data: dict[str, Any] = {}
        if home:
            data = _merge(data, self._read(self.home_file))
        if project:
            data = _merge(data, self._read(self.project_file))
        return data

    def store(self, data: dict[str, Any], target: RcTarget = "home") -> Path:
        """Write ``data`` to the home or project rc file.

        Args:
            data: Complete rc data to persist
            target: "home" or "project"

        Returns:
            The path written

        Raises:
            ProfileStoreError: If the directory or file cannot be written
        """
        path = self._path_for(target)

        if target == "home":
            try:
                path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
            except OSError as e:
                raise ProfileStoreError(
                    f"Unable to create the config directory {path.parent}",
                    hint="Check the permissions of your home directory",
                ) from e

        temp_file = path.with_name(path.name + ".tmp")
        try:
            fd = os.open(temp_file, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            temp_file.chmod(0o600)
            temp_file.replace(path)
        except OSError as e:
            try:
                temp_file.unlink(missing_ok=True)
            except OSError as cleanup_error:
                log.warning("rc_temp_file_not_removed", path=str(temp_file), error=str(cleanup_error))
            raise ProfileStoreError(
                f"Unable to write the rc file at {path}",
                hint="Check the file permissions",
            ) from e

        log.debug("rc_file_stored", path=str(path))
        return path

    @staticmethod
    def profiles(data: dict[str, Any]) -> list[Profile]:
        """Extract the profile list from rc data.

        Raises:
            ProfileStoreError: If the profile list or a stored profile is malformed
        """
        try:
            return [Profile.model_validate(raw) for raw in _raw_profiles(data)]
        except ValidationError as e:
            raise ProfileStoreError(
                "The rc file contains an invalid profile.",
                hint="Remove the profile with logout and log in again",
            ) from e

    @staticmethod
    def add_profile(data: dict[str, Any], profile: Profile) -> dict[str, Any]:
        """Return a copy of ``data`` with ``profile`` added or replaced by alias."""
        updated = copy.deepcopy(data)
        profiles = [p for p in _raw_profiles(updated) if p.get("alias") != profile.alias]
        profiles.append(profile.to_rc())

        if updated.get("login") is None:
            updated["login"] = {}
        updated["login"]["_profiles"] = profiles
        return updated

    @staticmethod
    def remove_profile(data: dict[str, Any], alias: str) -> dict[str, Any]:
        """Return a copy of ``data`` without the profile named ``alias``.

        Raises:
            AliasNotFoundError: If no profile has that alias
        """
        updated = copy.deepcopy(data)
        profiles = _raw_profiles(updated)
        remaining = [p for p in profiles if p.get("alias") != alias]

        if len(remaining) == len(profiles):
            raise AliasNotFoundError(alias)

        updated["login"]["_profiles"] = remaining
        return updated
