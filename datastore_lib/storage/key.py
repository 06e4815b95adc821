"""Hierarchical datastore keys.

A key is a slash-delimited, absolute string such as ``/Comedy/MontyPython``.
Segments may carry a type prefix separated by ``:`` (``/Actor:JohnCleese``).
Keys are used verbatim as file system paths by the file backend, so no
normalisation of ``.`` or ``..`` segments happens here; callers must
sanitize untrusted input themselves.
"""
from __future__ import annotations
import uuid
from functools import total_ordering
from typing import Iterable, List, Union

PATH_SEP = "/"
TYPE_SEP = ":"


@total_ordering
class Key:
    __slots__ = ("_value",)

    def __init__(self, value: Union[str, bytes, "Key"] = PATH_SEP, clean: bool = True) -> None:
        if isinstance(value, Key):
            value = value._value
        elif isinstance(value, (bytes, bytearray)):
            value = bytes(value).decode("utf-8")
        elif not isinstance(value, str):
            raise TypeError(f"Invalid key type: {type(value).__name__}")
        self._value = value
        if clean:
            self._clean()

    def _clean(self) -> None:
        value = self._value or PATH_SEP
        if not value.startswith(PATH_SEP):
            value = PATH_SEP + value
        while len(value) > 1 and value.endswith(PATH_SEP):
            value = value[:-1]
        self._value = value

    @classmethod
    def with_namespaces(cls, namespaces: Iterable[str]) -> "Key":
        return cls(PATH_SEP.join(namespaces))

    @classmethod
    def random(cls) -> "Key":
        return cls(uuid.uuid4().hex)

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"Key({self._value!r})"

    def __bytes__(self) -> bytes:
        return self._value.encode("utf-8")

    def __hash__(self) -> int:
        return hash(self._value)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Key):
            return self._value == other._value
        if isinstance(other, str):
            return self._value == other
        return NotImplemented

    def __lt__(self, other: "Key") -> bool:
        if not isinstance(other, Key):
            return NotImplemented
        return self.namespaces() < other.namespaces()

    def namespaces(self) -> List[str]:
        """Return the key segments, e.g. ``['Comedy', 'MontyPython']``."""
        return self._value[1:].split(PATH_SEP)

    list = namespaces

    def base_namespace(self) -> str:
        return self.namespaces()[-1]

    def type(self) -> str:
        """Type prefix of the last segment (``Actor`` for ``/Actor:JohnCleese``)."""
        parts = self.base_namespace().split(TYPE_SEP)
        return TYPE_SEP.join(parts[:-1]) if len(parts) > 1 else ""

    def name(self) -> str:
        return self.base_namespace().split(TYPE_SEP)[-1]

    def parent(self) -> "Key":
        parts = self.namespaces()
        if len(parts) == 1:
            return Key(PATH_SEP)
        return Key(PATH_SEP.join(parts[:-1]))

    def child(self, key: Union["Key", str]) -> "Key":
        key = key if isinstance(key, Key) else Key(key)
        if self._value == PATH_SEP:
            return key
        if key._value == PATH_SEP:
            return self
        return Key(self._value + key._value, clean=False)

    def instance(self, name: str) -> "Key":
        return Key(self._value + TYPE_SEP + name)

    def path(self) -> "Key":
        """Parent key extended with this key's type, e.g. ``/Comedy/Actor``."""
        p = str(self.parent())
        if not p.endswith(PATH_SEP):
            p += PATH_SEP
        return Key(p + self.type())

    def reverse(self) -> "Key":
        return Key.with_namespaces(reversed(self.namespaces()))

    def is_top_level(self) -> bool:
        return len(self.namespaces()) == 1

    def is_ancestor_of(self, other: "Key") -> bool:
        if self._value == PATH_SEP:
            return other._value != PATH_SEP
        mine = self.namespaces()
        theirs = other.namespaces()
        return len(theirs) > len(mine) and theirs[: len(mine)] == mine

    def is_descendant_of(self, other: "Key") -> bool:
        return other.is_ancestor_of(self)


def to_key(value: Union[Key, str, bytes]) -> Key:
    return value if isinstance(value, Key) else Key(value)
