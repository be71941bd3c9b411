"""Helpers for narrowing untyped TOML data.

tomllib hands back plain dicts and lists of `object`. Release configs and
status ledgers are user-editable, so every field is checked at the boundary
with these helpers before it reaches a typed dataclass.
"""

from __future__ import annotations

from typing import Mapping, TypeGuard, cast

StrDict = dict[str, object]
ObjList = list[object]


def is_str_dict(obj: object) -> TypeGuard[StrDict]:
    """Return True if obj is a dict with string keys."""
    if not isinstance(obj, dict):
        return False
    d = cast(dict[object, object], obj)
    return all(isinstance(k, str) for k in d.keys())


def as_str_dict(obj: object) -> StrDict | None:
    if is_str_dict(obj):
        return obj
    return None


def as_obj_list(obj: object) -> ObjList | None:
    if isinstance(obj, list):
        return cast(ObjList, obj)
    return None


def get_table(table: Mapping[str, object], key: str) -> StrDict | None:
    """Get a nested table (dict with string keys) from a mapping."""
    return as_str_dict(table.get(key))


def get_str(table: Mapping[str, object], key: str) -> str | None:
    """Get a string value, stripping whitespace.

    Returns None if missing, not a str, or empty after stripping.
    """
    value = table.get(key)
    if not isinstance(value, str):
        return None
    s = value.strip()
    return s or None


def get_raw_str(table: Mapping[str, object], key: str) -> str | None:
    """Get a string value verbatim (no stripping, empty allowed).

    File names and paths in release configs are taken as written.
    """
    value = table.get(key)
    if not isinstance(value, str):
        return None
    return value


def get_bool(table: Mapping[str, object], key: str) -> bool | None:
    value = table.get(key)
    if not isinstance(value, bool):
        return None
    return value


def as_str_list(obj: object) -> list[str] | None:
    """Return obj as a list of strings, or None if any element is not a str."""
    items = as_obj_list(obj)
    if items is None:
        return None
    out: list[str] = []
    for item in items:
        if not isinstance(item, str):
            return None
        out.append(item)
    return out


def as_str_map(obj: object) -> dict[str, str] | None:
    """Return obj as a str -> str mapping, or None if any value is not a str."""
    table = as_str_dict(obj)
    if table is None:
        return None
    out: dict[str, str] = {}
    for key, value in table.items():
        if not isinstance(value, str):
            return None
        out[key] = value
    return out
