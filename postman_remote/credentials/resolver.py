"""Resolution of a usable Postman API key from a ResolutionContext."""

from collections.abc import Callable

import structlog

from postman_remote.credentials import codec
from postman_remote.credentials.models import ResolutionContext
from postman_remote.credentials.prompt import PasskeyPrompt, TerminalPrompt
from postman_remote.exceptions import (
    DecryptionError,
    InvalidInputError,
    NoAuthorizationDataError,
)

log = structlog.get_logger(__name__)

PASSKEY_INPUT_PROMPT = "Enter the passkey: "
USING_PROFILE = "Using profile: "


class CredentialResolver:
    """Turn a resolution context into a raw API key.

    Resolution order:
    1. Explicit key on the context - returned unchanged
    2. Key cached on the context by an earlier resolution
    3. Profile matching the context alias:
       - unencrypted profiles are decoded
       - encrypted profiles prompt for a passkey and are decrypted

    Example:
        >>> resolver = CredentialResolver()
        >>> context = ResolutionContext(alias="work", profiles=store.profiles())
        >>> api_key = resolver.resolve(context)
        >>> resolver.resolve(context)  # served from the context cache
    """

    def __init__(
        self,
        prompt: PasskeyPrompt | None = None,
        announce: Callable[[str], None] | None = None,
    ) -> None:
        """Initialize credential resolver.

        Args:
            prompt: Source of the passkey for encrypted profiles. Defaults to
                the terminal.
            announce: Called with a "Using profile: <alias>" notice whenever a
                stored profile is read
        """
        self.prompt = prompt or TerminalPrompt()
        self.announce = announce

    def resolve(self, context: ResolutionContext) -> str:
        """Resolve the API key for ``context``.

        Args:
            context: Resolution inputs and session cache

        Returns:
            The raw API key

        Raises:
            NoAuthorizationDataError: No explicit key and no matching profile
            InvalidInputError: The passkey prompt returned nothing
            DecryptionError: The passkey does not decrypt the stored key
        """
        if context.explicit_secret:
            return context.explicit_secret

        # Held across the prompt so concurrent callers wait for one answer.
        with context.lock:
            if context.cached_secret is not None:
                log.debug("api_key_from_cache", alias=context.alias)
                return context.cached_secret

            secret = self._resolve_profile(context)
            context.cached_secret = secret
            return secret

    def _resolve_profile(self, context: ResolutionContext) -> str:
        profile = context.find_profile()
        if profile is None:
            log.debug("profile_not_found", alias=context.alias)
            raise NoAuthorizationDataError()

        log.info("profile_selected", alias=profile.alias, encrypted=profile.encrypted)
        if self.announce is not None:
            self.announce(f"{USING_PROFILE}{profile.alias}")

        if not profile.encrypted:
            try:
                return codec.decode(profile.secret)
            except ValueError:
                raise NoAuthorizationDataError(
                    hint=f'The stored API key for alias "{profile.alias}" is corrupted. Log in again.'
                ) from None

        passkey = self.prompt.prompt_hidden(PASSKEY_INPUT_PROMPT)
        if not passkey:
            raise InvalidInputError()

        try:
            return codec.decrypt(profile.secret, passkey)
        except codec.DecryptionFailure:
            log.debug("profile_decryption_failed", alias=profile.alias)
            raise DecryptionError() from None
