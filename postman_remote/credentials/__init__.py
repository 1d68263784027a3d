"""API-key storage, obfuscation and resolution."""

from postman_remote.credentials.codec import DecryptionFailure, decode, decrypt, encode, encrypt
from postman_remote.credentials.models import DEFAULT_ALIAS, Profile, ResolutionContext
from postman_remote.credentials.profile_store import ProfileStore
from postman_remote.credentials.prompt import PasskeyPrompt, TerminalPrompt
from postman_remote.credentials.resolver import CredentialResolver

__all__ = [
    "DEFAULT_ALIAS",
    "CredentialResolver",
    "DecryptionFailure",
    "PasskeyPrompt",
    "Profile",
    "ProfileStore",
    "ResolutionContext",
    "TerminalPrompt",
    "decode",
    "decrypt",
    "encode",
    "encrypt",
]
