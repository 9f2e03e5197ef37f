from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Iterator, List


def to_slashes(p: str) -> str:
    return p.replace("\\", "/")


def norm_path(p: str) -> str:
    """Normalize an archive entry name to a relative forward-slash form.

    Rules:
    - Convert backslashes to slashes
    - Strip leading/trailing slashes
    - Remove empty and '.' segments
    - Reject '..' segments
    """
    p = to_slashes(p).strip("/")
    parts = [q for q in p.split("/") if q not in ("", ".")]
    for q in parts:
        if q == "..":
            raise ValueError("Path may not contain '..'")
    return "/".join(parts)


@dataclass(frozen=True)
class WalkItem:
    name: str  # archive-relative, no trailing slash
    source: str  # filesystem path
    is_dir: bool


def _is_self_or_parent(name: str) -> bool:
    return name.endswith("/.") or name.endswith("/..") or name in (".", "..")


def _walk(root: str, current: str) -> Iterator[WalkItem]:
    with os.scandir(current) as it:
        children = sorted(it, key=lambda e: e.name)
    prefix = root + "/"
    for child in children:
        path = to_slashes(child.path)
        if _is_self_or_parent(path):
            continue
        name = path[len(prefix):] if path.startswith(prefix) else path
        if os.path.isfile(child.path):
            yield WalkItem(name, child.path, False)
        elif os.path.isdir(child.path):
            yield WalkItem(name, child.path, True)
            # symlinked directories are recorded but not descended into
            if not child.is_symlink():
                yield from _walk(root, child.path)


def walk_item(item: str) -> List[WalkItem]:
    """Plan the entries needed to add ``item`` (a file or a directory).

    A file maps to a single entry under its base name. A directory is walked
    parent-before-children with siblings in name order; names are relative to
    the directory itself, and every subdirectory yields its own entry so empty
    directories survive.
    """
    item = to_slashes(item)
    if len(item) > 1:
        item = item.rstrip("/") or "/"
    if os.path.isfile(item):
        return [WalkItem(item.rsplit("/", 1)[-1], item, False)]
    if not os.path.isdir(item):
        raise FileNotFoundError(item)
    return list(_walk(item, item))
