"""Result type for explicit error handling.

Every expected failure in relman (bad config, unwritable ledger, a build
process that cannot be spawned) travels as a value instead of an exception:

    def load(path: Path) -> Result[ReleaseConfig, ConfigError]:
        ...

    match load(Path("Release.toml")):
        case Ok(config):
            targets = config.targets()
        case Err(error):
            console.error(error.message)

Callers narrow with `isinstance(result, Err)` or `match`; exceptions remain
reserved for programming errors.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")
F = TypeVar("F")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful outcome carrying a value."""

    value: T

    def map_err(self, f: Callable[[object], F]) -> Ok[T]:
        return self

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failed outcome carrying an error value."""

    error: E

    def map_err(self, f: Callable[[E], F]) -> Err[F]:
        """Transform the carried error, e.g. to attach the file it came from."""
        return Err(f(self.error))

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Union[Ok[T], Err[E]]
