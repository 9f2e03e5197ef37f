"""Encryption policy: method names, engine codes and runtime capability.

Per-entry WinZip AES is provided by pyzipper, which in turn relies on
PyCryptodomex for the AES primitive. ``ENCRYPTION_SUPPORTED`` is computed once
at import from the installed library versions; ``Archive`` takes it as its
default but accepts an explicit capability flag instead.
"""

from __future__ import annotations

import re
from importlib import metadata as _metadata
from typing import Optional, Tuple

try:  # pragma: no cover - availability depends on environment
    from Cryptodome.Cipher import AES as _AES  # type: ignore
    _HAS_CRYPTODOME = True
except ImportError:  # pragma: no cover - graceful fallback
    _AES = None  # type: ignore
    _HAS_CRYPTODOME = False

from .constants import (
    EM_NONE,
    EM_AES_128,
    EM_AES_192,
    EM_AES_256,
    MIN_PYZIPPER_VERSION,
)
from .errors import InvalidEncryptionMethodError


ENCRYPTION_METHODS = {
    "none": EM_NONE,
    "aes128": EM_AES_128,
    "aes192": EM_AES_192,
    "aes256": EM_AES_256,
}


def encryption_method(name: str) -> Optional[int]:
    """Map a method name to its engine code, or None when unknown."""
    return ENCRYPTION_METHODS.get(name)


def check_method(name: str) -> int:
    code = encryption_method(name)
    if code is None:
        raise InvalidEncryptionMethodError(
            f"Unknown encryption type {name!r}",
            "supported: " + ", ".join(ENCRYPTION_METHODS),
        )
    return code


def parse_version(text: str) -> Tuple[int, ...]:
    """Leading numeric components of a version string: '0.3.6' -> (0, 3, 6)."""
    match = re.match(r"\d+(?:\.\d+)*", text)
    return tuple(map(int, match.group().split("."))) if match else ()


def _library_supports_encryption() -> bool:
    if not _HAS_CRYPTODOME:
        return False
    try:
        version = _metadata.version("pyzipper")
    except _metadata.PackageNotFoundError:
        return False
    return parse_version(version) >= MIN_PYZIPPER_VERSION


ENCRYPTION_SUPPORTED = _library_supports_encryption()
