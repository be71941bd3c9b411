"""Platform abstraction layer: files and processes."""

from .files import atomic_write_text, copy_file
from .process import SpawnError, merged_env, run_streaming

__all__ = [
    # files
    "atomic_write_text",
    "copy_file",
    # process
    "SpawnError",
    "merged_env",
    "run_streaming",
]
