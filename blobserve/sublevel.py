"""
Sublevels: nested namespaces in the file database

A Sublevel is a handle on one namespace. The root handle has no parent; every other handle keeps a
reference to the handle it was created from and the name (prefix) that selects it, so the chain of
names can be reconstructed for building urls (see blobserve.urls.build_url).
Namespaces are implicit: nothing is created in the database until a file is written in them.
"""

import json
from typing import Iterable, Optional

from blobserve.config import get_settings


class InvalidSublevel(ValueError):
    pass


class Sublevel:
    def __init__(self, parent: Optional["Sublevel"] = None, prefix: Optional[str] = None):
        if (parent is None) != (prefix is None):
            raise ValueError("A sublevel needs both a parent and a prefix, or neither for the root")
        if prefix is not None:
            check_sublevel_name(prefix)
        self.parent = parent
        self.prefix = prefix

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def namespace(self) -> tuple[str, ...]:
        """The names selecting this sublevel, outer to inner"""
        names = []
        level: Sublevel | None = self
        while level is not None and level.prefix is not None:
            names.append(level.prefix)
            level = level.parent
        return tuple(reversed(names))

    @property
    def key(self) -> str:
        """The namespace as stored in the database"""
        return json.dumps(list(self.namespace))

    def sublevel(self, name: str) -> "Sublevel":
        return Sublevel(self, name)

    def __eq__(self, other) -> bool:
        return isinstance(other, Sublevel) and self.namespace == other.namespace

    def __hash__(self) -> int:
        return hash(self.namespace)

    def __repr__(self) -> str:
        return f"Sublevel({'/'.join(self.namespace)!r})"


def check_sublevel_name(name: str) -> None:
    if not isinstance(name, str):
        raise InvalidSublevel(f"Sublevel name should be a string, not {type(name).__name__}")
    if not name:
        raise InvalidSublevel("Sublevel names cannot be empty")
    if "/" in name:
        raise InvalidSublevel(f"Sublevel name {name!r} cannot contain a '/'")


def resolve_sublevels(level: Sublevel, names: Iterable[str], max_depth: int | None = None) -> Sublevel:
    """
    Walk down the given sublevel names, starting from level, and return the innermost sublevel.
    Raises InvalidSublevel for empty names or if more than max_depth sublevels are given
    (default: the max_sublevel_depth setting).
    """
    if max_depth is None:
        max_depth = get_settings().max_sublevel_depth
    names = list(names)
    if len(names) > max_depth:
        raise InvalidSublevel(f"Too many sublevels ({len(names)}), at most {max_depth} are allowed")
    for name in names:
        level = level.sublevel(name)
    return level
