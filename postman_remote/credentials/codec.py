"""Obfuscation and passkey encryption of stored API keys.

Two independent pairs of pure functions live here:

- ``encode``/``decode``: a reversible, unkeyed Base-122 transform used to
  avoid storing a literal copy of an API key in the rc file. It is NOT a
  security control; anyone with the file can reverse it.
- ``encrypt``/``decrypt``: symmetric encryption keyed by a user passkey.
  Profiles saved with a passkey are protected by this pair.

Security Model:
- Key derived with PBKDF2-HMAC-SHA256 over the passkey and a fixed salt
- AES-SIV (deterministic authenticated encryption), hex encoded
- The same plaintext and passkey always yield the same ciphertext. That is
  intended for storing a single profile key, where no nonce can be kept
  alongside the value; it is not a general-purpose recommendation
- A wrong passkey or a tampered ciphertext fails the SIV tag check and
  raises DecryptionFailure instead of returning garbage
"""

from collections.abc import Iterator

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESSIV
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

# Characters that must not appear literally in the encoded text. Base-122
# folds a 7-bit group equal to one of these into a wider code point.
_ILLEGALS = (0, 10, 13, 34, 38, 92)
_ILLEGAL_INDEX = {value: index for index, value in enumerate(_ILLEGALS)}
_SHORTENED = 0b111

_KDF_SALT = b"postman-remote/profile-api-key"
_KDF_ITERATIONS = 480_000

# Prefix byte so that empty plaintexts are still valid AES-SIV input.
_FORMAT_VERSION = b"\x01"


class DecryptionFailure(ValueError):
    """Ciphertext could not be authenticated with the given passkey."""


def _seven_bit_groups(data: bytes) -> Iterator[int]:
    """Yield successive 7-bit groups of ``data``, zero-padding the last one."""
    accumulator = 0
    count = 0
    for byte in data:
        accumulator = (accumulator << 8) | byte
        count += 8
        while count >= 7:
            count -= 7
            yield (accumulator >> count) & 0x7F
        accumulator &= (1 << count) - 1
    if count:
        yield (accumulator << (7 - count)) & 0x7F


def encode(text: str) -> str:
    """Obfuscate ``text`` with Base-122 over its UTF-8 bytes.

    Every 7-bit group becomes one code point below 0x80. A group that would
    produce an illegal character is instead merged with the following group
    into a single code point between 0x80 and 0x7FF, with the illegal index
    stored in bits 8-10. When the illegal group is the last one, index 0b111
    marks the shortened form.

    Args:
        text: Any string, including lone surrogates

    Returns:
        The encoded string
    """
    groups = _seven_bit_groups(text.encode("utf-8", "surrogatepass"))
    encoded = []

    for bits in groups:
        if bits not in _ILLEGAL_INDEX:
            encoded.append(chr(bits))
            continue

        next_bits = next(groups, None)
        if next_bits is None:
            index, next_bits = _SHORTENED, bits
        else:
            index = _ILLEGAL_INDEX[bits]

        encoded.append(chr((index << 8) | 0x80 | next_bits))

    return "".join(encoded)


def decode(encoded: str) -> str:
    """Reverse :func:`encode`.

    Args:
        encoded: Output of encode()

    Returns:
        The original text

    Raises:
        ValueError: If ``encoded`` was not produced by encode()
    """
    decoded = bytearray()
    accumulator = 0
    count = 0

    def push(bits: int) -> None:
        nonlocal accumulator, count
        accumulator = (accumulator << 7) | bits
        count += 7
        if count >= 8:
            count -= 8
            decoded.append((accumulator >> count) & 0xFF)
            accumulator &= (1 << count) - 1

    for char in encoded:
        code_point = ord(char)

        if code_point < 0x80:
            push(code_point)
            continue

        if code_point > 0x7FF or not code_point & 0x80:
            raise ValueError(f"Invalid code point in encoded text: {code_point:#x}")

        index = code_point >> 8
        if index != _SHORTENED:
            if index >= len(_ILLEGALS):
                raise ValueError(f"Invalid illegal-character index in encoded text: {index}")
            push(_ILLEGALS[index])
        push(code_point & 0x7F)

    # Remaining bits (fewer than 8) are padding from the final group.
    return bytes(decoded).decode("utf-8", "surrogatepass")


def _derive_key(passkey: str) -> bytes:
    """Derive the 512-bit AES-SIV key for ``passkey``."""
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=64,
        salt=_KDF_SALT,
        iterations=_KDF_ITERATIONS,
    )
    return kdf.derive(passkey.encode("utf-8"))


def encrypt(plaintext: str, passkey: str) -> str:
    """Encrypt ``plaintext`` with ``passkey``.

    Args:
        plaintext: Value to protect (usually a Postman API key)
        passkey: User-supplied passkey, never stored

    Returns:
        Lowercase hex ciphertext, deterministic for a given input pair
    """
    cipher = AESSIV(_derive_key(passkey))
    return cipher.encrypt(_FORMAT_VERSION + plaintext.encode("utf-8"), None).hex()


def decrypt(ciphertext: str, passkey: str) -> str:
    """Decrypt hex ``ciphertext`` produced by :func:`encrypt`.

    Args:
        ciphertext: Hex string from encrypt()
        passkey: The passkey used for encryption

    Returns:
        The original plaintext

    Raises:
        DecryptionFailure: On a wrong passkey or corrupted ciphertext
    """
    try:
        data = bytes.fromhex(ciphertext)
        plaintext = AESSIV(_derive_key(passkey)).decrypt(data, None)
    except (ValueError, InvalidTag) as e:
        raise DecryptionFailure("Ciphertext could not be decrypted") from e

    if not plaintext.startswith(_FORMAT_VERSION):
        raise DecryptionFailure("Unsupported ciphertext format")

    try:
        return plaintext[len(_FORMAT_VERSION) :].decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecryptionFailure("Decrypted value is not valid text") from e
