from __future__ import annotations

from typing import Optional


class ZipkitError(Exception):
    """Base class for zipkit errors."""

    def __init__(self, message: str, suggestion: Optional[str] = None):
        self.message = message
        self.suggestion = suggestion
        super().__init__(message)

    def __str__(self) -> str:
        if self.suggestion:
            return f"{self.message} ({self.suggestion})"
        return self.message


# Lifecycle
class NotInitializedError(ZipkitError):
    def __init__(self, message: str = "No ZIP archive"):
        super().__init__(message, "create a new or open an existing ZIP archive first")


class ArchiveOpenError(ZipkitError):
    pass


class ArchiveExistsError(ArchiveOpenError):
    pass


# Lookups
class NotFoundError(ZipkitError, FileNotFoundError):
    """A source path, archive file or archive entry does not exist."""


# Encryption policy
class InvalidEncryptionMethodError(ZipkitError, ValueError):
    pass


class EncryptionUnsupportedError(ZipkitError, RuntimeError):
    def __init__(self, message: str = "Encryption is not supported in this environment"):
        super().__init__(message, "install pyzipper>=0.3 and pycryptodomex")


class PasswordRequiredError(ZipkitError, ValueError):
    def __init__(self, message: str = "A password is required to encrypt"):
        super().__init__(message, "pass a non-empty password")


# Engine
class EngineError(ZipkitError):
    pass
