"""TOML rendering for the current release config schema.

tomllib only reads TOML, so saved configs are rendered by hand, in the same
layout users write: scalar fields first, then one `[[config.<os>.<arch>]]`
block per build.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from ..toml_text import toml_key, toml_string
from .v2 import ReleaseConfig, TargetOverride

__all__ = ["dumps_release_config"]


def _string_array(values: Iterable[str]) -> str:
    return "[" + ", ".join(toml_string(v) for v in values) + "]"


def _inline_table(values: Mapping[str, str]) -> str:
    if not values:
        return "{}"
    pairs = ", ".join(f"{toml_key(k)} = {toml_string(v)}" for k, v in values.items())
    return "{ " + pairs + " }"


def _override_block(os_name: str, arch_name: str, override: TargetOverride) -> list[str]:
    lines = ["", f"[[config.{toml_key(os_name)}.{toml_key(arch_name)}]]"]
    if override.build_name is not None:
        lines.append(f"build_name = {toml_string(override.build_name)}")
    lines.append(f"libs = {_string_array(override.libs)}")
    lines.append(f"env = {_inline_table(override.env)}")
    return lines


def dumps_release_config(document: ReleaseConfig) -> str:
    lines = [
        f"release_path = {toml_string(document.release_path)}",
        f"included_files = {_string_array(document.included_files)}",
    ]

    if not document.config:
        lines += ["", "[config]"]

    for os_name, arches in document.config.items():
        empty_arches = [arch for arch, overrides in arches.items() if not overrides]
        if not arches or empty_arches:
            lines += ["", f"[config.{toml_key(os_name)}]"]
            lines += [f"{toml_key(arch)} = []" for arch in empty_arches]
        for arch_name, overrides in arches.items():
            for override in overrides:
                lines += _override_block(os_name, arch_name, override)

    return "\n".join(lines) + "\n"
