"""Profile and resolution-context models for credential resolution."""

import threading
from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_ALIAS = "default"


class Profile(BaseModel):
    """A stored API-key profile.

    ``secret`` holds the Base-122 encoded key when ``encrypted`` is False and
    the hex ciphertext when it is True. In the rc file the secret is kept
    under the Newman field name ``postmanApiKey``.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    alias: str = Field(..., description="User-chosen profile name")
    secret: str = Field(..., alias="postmanApiKey", description="Encoded or encrypted API key")
    encrypted: bool = Field(default=False, description="Whether secret needs a passkey")

    def to_rc(self) -> dict:
        """Serialize for the rc file, using the on-disk field names."""
        return self.model_dump(by_alias=True)


@dataclass
class ResolutionContext:
    """Inputs and session cache for resolving one API key.

    The caller owns the context and passes the same instance to every
    fetch of one run, so an encrypted profile prompts for its passkey at
    most once. ``cached_secret`` is written only after a resolution fully
    succeeds.

    Attributes:
        explicit_secret: API key given directly (CLI option or environment)
        alias: Profile alias to look up when no explicit key is given
        profiles: Stored profiles, None when no rc file data is available
        cached_secret: Raw key resolved earlier in this session
    """

    explicit_secret: str | None = None
    alias: str | None = DEFAULT_ALIAS
    profiles: list[Profile] | None = None
    cached_secret: str | None = field(default=None, repr=False)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def find_profile(self) -> Profile | None:
        """Return the first profile whose alias matches, if any."""
        if not self.profiles or not self.alias:
            return None
        return next((profile for profile in self.profiles if profile.alias == self.alias), None)

    def clear(self) -> None:
        """Forget the cached key at the end of a session."""
        with self.lock:
            self.cached_secret = None
