from __future__ import annotations

import logging
import os
from typing import Iterable, Iterator, List, Optional, Sequence, Union

from .constants import DEFAULT_ENCRYPTION, DIR_SUFFIX
from .encryption import ENCRYPTION_SUPPORTED, check_method
from .engine import EntryStat, PyzipperEngine
from .errors import (
    ArchiveExistsError,
    ArchiveOpenError,
    EncryptionUnsupportedError,
    EngineError,
    NotFoundError,
    NotInitializedError,
    PasswordRequiredError,
)
from .fileobject import FileObject
from .pathutil import to_slashes, walk_item


logger = logging.getLogger(__name__)


def _password(value) -> Optional[str]:
    return None if value is None else str(value)


class Archive:
    """Stateful handle to a single ZIP archive.

    Bind it with ``create`` or ``open``, mutate and query it, then ``save``.
    ``save`` is mandatory: it is the only point at which changes are written
    and the handle is released. Using the archive after ``save`` without a
    fresh ``create``/``open`` is a usage error.

    Args:
        supports_encryption: Whether per-entry encryption may be used. None
            takes the capability detected at import
            (``zipkit.encryption.ENCRYPTION_SUPPORTED``).
        engine: Archive engine class providing ``open_for_write`` and
            ``open_for_read``.
    """

    def __init__(self, *, supports_encryption: Optional[bool] = None, engine=PyzipperEngine):
        self.path: Optional[str] = None
        self.mode: Optional[str] = None
        self.supports_encryption = ENCRYPTION_SUPPORTED if supports_encryption is None else bool(supports_encryption)
        self._engine = engine
        self._handle = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None and self._handle is not None and not self._handle.closed:
            self.save()

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.exists(name)

    def __repr__(self) -> str:
        return f"Archive(path={self.path!r}, mode={self.mode!r})"

    # -- lifecycle ---------------------------------------------------------

    def create(self, filename: str, *, overwrite: bool = False, password=None) -> "Archive":
        """Start a new archive at ``filename``.

        Args:
            filename: Destination path.
            overwrite: Replace an existing file; otherwise an existing
                destination is an error.
            password: Default password used when extracting in this session.
        """
        try:
            handle = self._engine.open_for_write(filename, overwrite)
        except FileExistsError as exc:
            raise ArchiveExistsError(
                f"Error opening {filename}: file exists", "pass overwrite=True to replace it"
            ) from exc
        except EngineError as exc:
            raise ArchiveOpenError(f"Error opening {filename}: {exc.message}") from exc
        if password is not None:
            handle.set_password(_password(password))
        self._bind(filename, "w", handle)
        return self

    def open(self, filename: str) -> "Archive":
        """Open an existing archive for reading and modification."""
        if not os.path.exists(filename):
            raise NotFoundError(f"{filename} could not be found")
        try:
            handle = self._engine.open_for_read(filename)
        except EngineError as exc:
            raise ArchiveOpenError(f"Error opening {filename}: {exc.message}") from exc
        self._bind(filename, "r", handle)
        return self

    def _bind(self, filename: str, mode: str, handle) -> None:
        self.path = filename
        self.mode = mode
        self._handle = handle
        logger.debug("bound %s (%s)", filename, mode)

    def _check_archive(self):
        if self._handle is None:
            raise NotInitializedError("No ZIP archive")
        return self._handle

    def save(self) -> bool:
        """Write pending changes and release the archive file."""
        return self._check_archive().close()

    # -- mutation ----------------------------------------------------------

    def _check_encryption(self, password: Optional[str], method: str) -> Optional[int]:
        if not self.supports_encryption:
            if password is not None:
                raise EncryptionUnsupportedError("Encrypting files is not supported in this environment")
            return None
        return check_method(method)

    def add(
        self,
        item: str,
        *,
        password=None,
        encryption: str = DEFAULT_ENCRYPTION,
        compress: bool = True,
    ) -> "Archive":
        """Add a file, or a directory tree, to the archive.

        A file is stored under its base name. A directory's contents are
        stored relative to the directory itself, with an explicit entry for
        every subdirectory.

        Args:
            item: File or directory path.
            password: Encrypt each added file with this password.
            encryption: none, aes128, aes192 or aes256 (default).
            compress: False stores the files without compression.
        """
        handle = self._check_archive()
        password = _password(password)
        method = self._check_encryption(password, encryption)
        try:
            plan = walk_item(item)
        except FileNotFoundError as exc:
            raise NotFoundError(f"{item} could not be found") from exc

        for node in plan:
            if node.is_dir:
                handle.insert_dir(node.name + DIR_SUFFIX)
            else:
                self._add_file(handle, node.name, node.source, password, method, compress)
        return self

    def _add_file(self, handle, name: str, filename: str, password, method, compress: bool) -> None:
        with open(filename, "rb") as fh:
            handle.insert(name, fh.read())
        if password is not None and method is not None:
            handle.set_entry_encryption(name, method, password)
        if not compress:
            handle.set_entry_compression(name, True)
        logger.debug("added %s from %s", name, filename)

    def delete(self, name: str) -> "Archive":
        """Delete the entry called exactly ``name``."""
        handle = self._check_archive()
        if not handle.delete_entry(name):
            raise NotFoundError(f"{name} could not be found")
        return self

    def encrypt(self, password, method: str = DEFAULT_ENCRYPTION) -> "Archive":
        """Encrypt every file entry that is not encrypted yet.

        Entries that already carry encryption keep it, whatever their
        password or method.

        An empty or missing password raises ``PasswordRequiredError``.
        """
        handle = self._check_archive()
        if not self.supports_encryption:
            raise EncryptionUnsupportedError("Encrypting files is not supported in this environment")
        code = check_method(method)
        if password is None or password == "":
            raise PasswordRequiredError()
        password = _password(password)
        for stat in list(self._stats(handle)):
            if stat.is_dir:
                continue
            if stat.encryption_method == 0:
                handle.set_entry_encryption(stat.name, code, password)
        return self

    # -- queries -----------------------------------------------------------

    def _stats(self, handle) -> Iterator[EntryStat]:
        for i in range(handle.entry_count()):
            stat = handle.stat_index(i)
            if stat is not None:
                yield stat

    def list(self, path: Optional[str] = None) -> List[FileObject]:
        """List the files (not directories) in the archive.

        Args:
            path: Only list files below this folder, e.g. ``src/Exception``.
        """
        handle = self._check_archive()
        prefix = to_slashes(path).rstrip("/") + "/" if path else None
        result: List[FileObject] = []
        for stat in self._stats(handle):
            if stat.is_dir:
                continue
            if prefix is not None and not stat.name.startswith(prefix):
                continue
            obj = FileObject(
                name=stat.name,
                size=stat.size,
                timestamp=stat.mtime,
                compressed_size=stat.compressed_size,
            )
            if self.supports_encryption and stat.encryption_method is not None:
                obj.encrypted = stat.encryption_method != 0
            result.append(obj)
        return result

    def count(self) -> int:
        """Number of files in the archive; directory entries are not counted."""
        handle = self._check_archive()
        return sum(1 for stat in self._stats(handle) if not stat.is_dir)

    def exists(self, name: str) -> bool:
        """Exact-name lookup; directories need their trailing slash."""
        return self._check_archive().locate(name)

    # -- extraction --------------------------------------------------------

    def extract(self, destination: str, *, password=None, files: Optional[Iterable[str]] = None) -> bool:
        """Extract the archive, or only ``files``, into ``destination``.

        Returns False when the engine could not extract, e.g. a wrong or
        missing password.
        """
        handle = self._check_archive()
        if password not in (None, ""):
            handle.set_password(_password(password))
        names = None if files is None else [files] if isinstance(files, str) else list(files)
        return handle.extract_all(destination, names)

    # -- one-shot helpers --------------------------------------------------

    @classmethod
    def zip(
        cls,
        source: Union[str, Sequence[str]],
        destination: str,
        *,
        overwrite: bool = False,
        password=None,
        encryption: str = DEFAULT_ENCRYPTION,
        compress: bool = True,
        **kwargs,
    ) -> bool:
        """Create ``destination`` from one or more files or directories.

        Sources are added in order with the same options; the first failure
        aborts the call.
        """
        archive = cls(**kwargs)
        archive.create(destination, overwrite=overwrite)
        sources = [source] if isinstance(source, (str, os.PathLike)) else list(source)
        for item in sources:
            archive.add(os.fspath(item), password=password, encryption=encryption, compress=compress)
        return archive.save()

    @classmethod
    def unzip(
        cls,
        source: str,
        destination: str,
        *,
        password=None,
        files: Optional[Iterable[str]] = None,
        **kwargs,
    ) -> bool:
        """Extract the ZIP file ``source`` into ``destination``."""
        archive = cls(**kwargs).open(source)
        result = archive.extract(destination, password=password, files=files)
        archive.save()
        return result


def zip_paths(source, destination: str, **options) -> bool:
    return Archive.zip(source, destination, **options)


def unzip(source: str, destination: str, **options) -> bool:
    return Archive.unzip(source, destination, **options)
