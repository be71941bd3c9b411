"""Quoting for hand-rendered TOML.

tomllib only reads TOML, so the config and ledger writers build their
documents as text and quote every string and non-bare key through here.
"""

from __future__ import annotations

import json
import re

__all__ = ["toml_key", "toml_string"]

_BARE_KEY = re.compile(r"^[A-Za-z0-9_-]+$")


def toml_string(value: str) -> str:
    """Render value as a TOML basic string."""
    # JSON string escapes are a subset of TOML basic-string escapes, but
    # json.dumps leaves DEL raw and TOML forbids it.
    return json.dumps(value, ensure_ascii=False).replace("\x7f", "\\u007f")


def toml_key(key: str) -> str:
    return key if _BARE_KEY.match(key) else toml_string(key)
