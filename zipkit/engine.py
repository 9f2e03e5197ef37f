from __future__ import annotations

import logging
import os
import time
import zlib
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Protocol, Set

import pyzipper

from .constants import (
    AES_KEY_BITS,
    AES_STRENGTH_CODES,
    DIR_SUFFIX,
    EM_NONE,
    EM_TRAD_PKWARE,
    FLAG_ENCRYPTED,
)
from .errors import EngineError
from .pathutil import norm_path


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntryStat:
    name: str
    size: int
    compressed_size: int
    mtime: int
    encryption_method: Optional[int] = None  # None: engine does not report it

    @property
    def is_dir(self) -> bool:
        return self.name.endswith(DIR_SUFFIX)


class ArchiveEngine(Protocol):
    """Handle to one ZIP container, as consumed by ``Archive``.

    Handles are obtained from the ``open_for_write``/``open_for_read``
    classmethods and stay valid until ``close``.
    """

    @classmethod
    def open_for_write(cls, path: str, overwrite: bool) -> "ArchiveEngine": ...

    @classmethod
    def open_for_read(cls, path: str) -> "ArchiveEngine": ...

    def insert(self, name: str, data: bytes) -> None: ...

    def insert_dir(self, name: str) -> None: ...

    def set_entry_encryption(self, name: str, method: int, password: Optional[str]) -> None: ...

    def set_entry_compression(self, name: str, store_only: bool) -> None: ...

    def delete_entry(self, name: str) -> bool: ...

    def stat_index(self, index: int) -> Optional[EntryStat]: ...

    def entry_count(self) -> int: ...

    def locate(self, name: str) -> bool: ...

    def set_password(self, password: Optional[str]) -> None: ...

    def extract_all(self, destination: str, names: Optional[Iterable[str]] = None) -> bool: ...

    def close(self) -> bool: ...

    @property
    def closed(self) -> bool: ...


@dataclass
class _PendingEntry:
    name: str
    data: Optional[bytes]  # None for directories
    mtime: float
    store_only: bool = False
    method: int = EM_NONE
    password: Optional[str] = None

    @property
    def encrypted(self) -> bool:
        return self.method != EM_NONE and self.password is not None

    def compressed_size(self) -> int:
        if self.data is None:
            return 0
        if self.store_only:
            return len(self.data)
        co = zlib.compressobj(zlib.Z_DEFAULT_COMPRESSION, zlib.DEFLATED, -15)
        return len(co.compress(self.data) + co.flush())


def _date_time_to_epoch(date_time) -> int:
    return int(time.mktime(tuple(date_time) + (0, 0, -1)))


def _encryption_code(info) -> int:
    if not info.flag_bits & FLAG_ENCRYPTED:
        return EM_NONE
    # AESZipInfo decodes the WinZip AES extra field; plain ZipCrypto has none
    strength = getattr(info, "wz_aes_strength", None)
    return AES_STRENGTH_CODES.get(strength, EM_TRAD_PKWARE)


def _drop_members(zf, names: Set[str]) -> None:
    """Unlink members from the central directory written on close.

    Their local records stay in the file as unreferenced bytes.
    """
    zf.filelist[:] = [i for i in zf.filelist if i.filename not in names]
    for name in names:
        zf.NameToInfo.pop(name, None)
    zf._didModify = True


class PyzipperEngine:
    """Staging ZIP engine backed by pyzipper.

    Mutations are kept in memory and applied on ``close``: a fresh archive is
    written from scratch, an existing one is appended to with deleted or
    replaced members dropped from its central directory. Until ``close`` the
    file on disk is never touched.
    """

    def __init__(self, path: str, *, fresh: bool, infos: Iterable = ()):
        self.path = path
        self._fresh = fresh
        self._original: Dict[str, object] = {}
        self._order: List[str] = []
        for info in infos:
            if info.filename not in self._original:
                self._order.append(info.filename)
            self._original[info.filename] = info
        self._pending: Dict[str, _PendingEntry] = {}
        self._removed: Set[str] = set()
        self._password: Optional[str] = None
        self._closed = False

    @classmethod
    def open_for_write(cls, path: str, overwrite: bool) -> "PyzipperEngine":
        if os.path.isdir(path):
            raise EngineError(f"{path} is a directory")
        if os.path.exists(path) and not overwrite:
            raise FileExistsError(path)
        parent = os.path.dirname(os.path.abspath(path))
        if not os.path.isdir(parent):
            raise EngineError(f"Directory {parent} does not exist")
        if not os.access(parent, os.W_OK):
            raise EngineError(f"Directory {parent} is not writable")
        logger.debug("staging new archive %s", path)
        return cls(path, fresh=True)

    @classmethod
    def open_for_read(cls, path: str) -> "PyzipperEngine":
        try:
            with pyzipper.AESZipFile(path) as zf:
                infos = zf.infolist()
        except (OSError, pyzipper.BadZipFile) as exc:
            raise EngineError(str(exc)) from exc
        logger.debug("opened %s with %d member(s)", path, len(infos))
        return cls(path, fresh=False, infos=infos)

    @property
    def closed(self) -> bool:
        return self._closed

    # -- helpers -----------------------------------------------------------

    def _check_open(self) -> None:
        if self._closed:
            raise EngineError(f"Archive {self.path} is closed; create or open it again")

    def _is_original(self, name: str) -> bool:
        return name in self._original and name not in self._removed

    def _stage(self, entry: _PendingEntry) -> None:
        if self._is_original(entry.name):
            self._removed.add(entry.name)
        if entry.name not in self._pending and entry.name not in self._order:
            self._order.append(entry.name)
        self._pending[entry.name] = entry

    def _materialize(self, name: str) -> _PendingEntry:
        """Pending entry for ``name``, reading an original member if needed."""
        entry = self._pending.get(name)
        if entry is not None:
            return entry
        if not self._is_original(name):
            raise EngineError(f"{name} could not be found")
        info = self._original[name]
        if name.endswith(DIR_SUFFIX):
            data = None
        else:
            pwd = self._password.encode("utf-8") if self._password else None
            try:
                with pyzipper.AESZipFile(self.path) as zf:
                    data = zf.read(name, pwd=pwd)
            except (OSError, RuntimeError, pyzipper.BadZipFile) as exc:
                raise EngineError(f"Cannot read {name} from {self.path}: {exc}") from exc
        entry = _PendingEntry(
            name=name,
            data=data,
            mtime=_date_time_to_epoch(info.date_time),
            store_only=info.compress_type == pyzipper.ZIP_STORED,
        )
        self._stage(entry)
        return entry

    # -- mutations ---------------------------------------------------------

    def insert(self, name: str, data: bytes) -> None:
        self._check_open()
        self._stage(_PendingEntry(name=name, data=bytes(data), mtime=time.time()))

    def insert_dir(self, name: str) -> None:
        self._check_open()
        if not name.endswith(DIR_SUFFIX):
            name += DIR_SUFFIX
        if self.locate(name):
            return
        self._stage(_PendingEntry(name=name, data=None, mtime=time.time()))

    def set_entry_encryption(self, name: str, method: int, password: Optional[str]) -> None:
        self._check_open()
        entry = self._materialize(name)
        if method != EM_NONE and method not in AES_KEY_BITS:
            raise EngineError(f"Unsupported encryption method code {method:#x}")
        entry.method = method
        entry.password = password

    def set_entry_compression(self, name: str, store_only: bool) -> None:
        self._check_open()
        self._materialize(name).store_only = store_only

    def delete_entry(self, name: str) -> bool:
        self._check_open()
        if not self.locate(name):
            return False
        self._pending.pop(name, None)
        if name in self._original:
            self._removed.add(name)
        self._order.remove(name)
        return True

    # -- queries -----------------------------------------------------------

    def entry_count(self) -> int:
        self._check_open()
        return len(self._order)

    def locate(self, name: str) -> bool:
        self._check_open()
        return name in self._pending or self._is_original(name)

    def stat_index(self, index: int) -> Optional[EntryStat]:
        self._check_open()
        if index < 0 or index >= len(self._order):
            return None
        name = self._order[index]
        entry = self._pending.get(name)
        if entry is not None:
            return EntryStat(
                name=name,
                size=len(entry.data or b""),
                compressed_size=entry.compressed_size(),
                mtime=int(entry.mtime),
                encryption_method=entry.method if entry.encrypted else EM_NONE,
            )
        info = self._original[name]
        return EntryStat(
            name=name,
            size=info.file_size,
            compressed_size=info.compress_size,
            mtime=_date_time_to_epoch(info.date_time),
            encryption_method=_encryption_code(info),
        )

    # -- extraction --------------------------------------------------------

    def set_password(self, password: Optional[str]) -> None:
        self._check_open()
        self._password = password

    def _extract_pending(self, entry: _PendingEntry, destination: str) -> None:
        if entry.encrypted and self._password != entry.password:
            raise RuntimeError(f"Bad password for file {entry.name!r}")
        target = os.path.join(destination, *norm_path(entry.name).split("/"))
        if entry.data is None:
            os.makedirs(target, exist_ok=True)
            return
        os.makedirs(os.path.dirname(target), exist_ok=True)
        with open(target, "wb") as fh:
            fh.write(entry.data)

    def extract_all(self, destination: str, names: Optional[Iterable[str]] = None) -> bool:
        self._check_open()
        selected = list(self._order) if names is None else list(names)
        missing = [n for n in selected if not self.locate(n)]
        if missing:
            logger.warning("cannot extract from %s: no such entries %s", self.path, missing)
            return False
        originals = [n for n in selected if n not in self._pending]
        pwd = self._password.encode("utf-8") if self._password else None
        try:
            os.makedirs(destination, exist_ok=True)
            if originals:
                with pyzipper.AESZipFile(self.path) as zf:
                    for name in originals:
                        zf.extract(name, destination, pwd=pwd)
            for name in selected:
                entry = self._pending.get(name)
                if entry is not None:
                    self._extract_pending(entry, destination)
        except (OSError, RuntimeError, ValueError, zlib.error, pyzipper.BadZipFile) as exc:
            logger.warning("extracting %s to %s failed: %s", self.path, destination, exc)
            return False
        return True

    # -- commit ------------------------------------------------------------

    def _write_entry(self, zf, entry: _PendingEntry) -> None:
        if entry.encrypted:
            zf.setpassword(entry.password.encode("utf-8"))
            zf.setencryption(pyzipper.WZ_AES, nbits=AES_KEY_BITS[entry.method])
        else:
            zf.setencryption(None)
            zf.setpassword(None)
        # writestr stamps the member with the current time and, for names
        # ending in "/", directory attributes
        if entry.data is None:
            zf.writestr(entry.name, b"", compress_type=pyzipper.ZIP_STORED)
            return
        compress_type = pyzipper.ZIP_STORED if entry.store_only else pyzipper.ZIP_DEFLATED
        zf.writestr(entry.name, entry.data, compress_type=compress_type)

    def _write_pending(self, zf) -> None:
        for name in self._order:
            entry = self._pending.get(name)
            if entry is not None:
                self._write_entry(zf, entry)

    def _rewrite(self) -> None:
        if self._fresh:
            with pyzipper.AESZipFile(self.path, "w", compression=pyzipper.ZIP_DEFLATED) as zf:
                self._write_pending(zf)
            return
        with open(self.path, "r+b") as fp:
            with pyzipper.AESZipFile(fp, "a", compression=pyzipper.ZIP_DEFLATED) as zf:
                if self._removed:
                    _drop_members(zf, self._removed)
                self._write_pending(zf)
            # the new central directory can end before the old one did;
            # pyzipper leaves the old tail in place on append
            fp.truncate()

    def close(self) -> bool:
        self._check_open()
        self._closed = True
        if not self._fresh and not self._pending and not self._removed:
            return True
        try:
            self._rewrite()
        except (OSError, RuntimeError, pyzipper.BadZipFile) as exc:
            logger.error("could not write %s: %s", self.path, exc)
            return False
        logger.debug("wrote %s (%d entries)", self.path, len(self._order))
        return True
