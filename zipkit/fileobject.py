from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional, Tuple


# key -> attribute, in listing order
_FIELDS: Dict[str, str] = {
    "name": "name",
    "size": "size",
    "timestamp": "timestamp",
    "compressedSize": "compressed_size",
    "encrypted": "encrypted",
}
_ALIASES = {"compressed_size": "compressedSize"}


class FileObject:
    """Metadata for one archive entry, readable as a record or as a mapping.

    Typed fields are plain attributes (``obj.compressed_size``); mapping access
    uses the listing keys (``obj["compressedSize"]``). Unknown keys read as
    ``None`` and may be set, in which case they are kept after the typed
    fields in insertion order. A field that is unset or deleted is absent:
    ``"encrypted" in obj`` is False and ``obj["encrypted"]`` is None.
    """

    __slots__ = ("name", "size", "timestamp", "compressed_size", "encrypted", "_extra")

    def __init__(
        self,
        name: Optional[str] = None,
        size: Optional[int] = None,
        timestamp: Optional[int] = None,
        compressed_size: Optional[int] = None,
        encrypted: Optional[bool] = None,
        **extra: Any,
    ):
        self.name = name
        self.size = size
        self.timestamp = timestamp
        self.compressed_size = compressed_size
        self.encrypted = encrypted
        self._extra: Dict[str, Any] = {}
        for key, value in extra.items():
            self[key] = value

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FileObject":
        obj = cls()
        for key, value in data.items():
            obj[key] = value
        return obj

    def _attr(self, key: str) -> Optional[str]:
        return _FIELDS.get(_ALIASES.get(key, key))

    def get(self, key: str, default: Any = None) -> Any:
        attr = self._attr(key)
        if attr is not None:
            value = getattr(self, attr)
        else:
            value = self._extra.get(key)
        return default if value is None else value

    def __getitem__(self, key: str) -> Any:
        return self.get(key)

    def __setitem__(self, key: str, value: Any) -> None:
        attr = self._attr(key)
        if attr is not None:
            setattr(self, attr, value)
        else:
            self._extra[key] = value

    def __delitem__(self, key: str) -> None:
        attr = self._attr(key)
        if attr is not None:
            setattr(self, attr, None)
        else:
            self._extra.pop(key, None)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        return self.get(key) is not None

    def keys(self) -> List[str]:
        present = [k for k, attr in _FIELDS.items() if getattr(self, attr) is not None]
        return present + [k for k, v in self._extra.items() if v is not None]

    def items(self) -> List[Tuple[str, Any]]:
        return [(k, self[k]) for k in self.keys()]

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self.keys())

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.items())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FileObject):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        fields = ", ".join(f"{k}={v!r}" for k, v in self.items())
        return f"FileObject({fields})"


# Name used throughout the docs for listing results
EntryMetadata = FileObject
