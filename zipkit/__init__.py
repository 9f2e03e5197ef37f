"""
zipkit: a stateful management layer over ZIP archives.

Features:

- ``Archive`` handle with an explicit create/open -> mutate -> save lifecycle.
- Recursive directory adding with archive-relative names and explicit
  directory entries, so empty folders survive a round trip.
- Per-entry WinZip AES encryption (128/192/256 bit) via pyzipper and
  PyCryptodomex, with capability detection and bulk ``encrypt``.
- Listing and counting that skip directory markers, prefix filtering on
  folder boundaries, and extraction with soft failure on bad passwords.
- One-shot ``zip_paths``/``unzip`` helpers and a ``zipkit`` command line tool.
"""

__version__ = "0.1"

from .archive import Archive, zip_paths, unzip
from .encryption import ENCRYPTION_METHODS, ENCRYPTION_SUPPORTED
from .engine import ArchiveEngine, EntryStat, PyzipperEngine
from .errors import (
    ZipkitError,
    NotInitializedError,
    ArchiveOpenError,
    ArchiveExistsError,
    NotFoundError,
    InvalidEncryptionMethodError,
    EncryptionUnsupportedError,
    PasswordRequiredError,
    EngineError,
)
from .fileobject import FileObject, EntryMetadata

__all__ = [
    "Archive",
    "zip_paths",
    "unzip",
    "ENCRYPTION_METHODS",
    "ENCRYPTION_SUPPORTED",
    "ArchiveEngine",
    "EntryStat",
    "PyzipperEngine",
    "ZipkitError",
    "NotInitializedError",
    "ArchiveOpenError",
    "ArchiveExistsError",
    "NotFoundError",
    "InvalidEncryptionMethodError",
    "EncryptionUnsupportedError",
    "PasswordRequiredError",
    "EngineError",
    "FileObject",
    "EntryMetadata",
]
