"""Skip rules for files that must never be uploaded."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

# Platform metadata files dropped next to real content
DEFAULT_IGNORE_NAMES: frozenset[str] = frozenset({".DS_Store"})

HIDDEN_PREFIX = "."


@dataclass(frozen=True)
class IgnoreFilter:
    """Exact basenames plus the hidden-file prefix rule.

    Pure predicate: never touches the filesystem.
    """

    names: frozenset[str] = DEFAULT_IGNORE_NAMES

    @classmethod
    def from_names(cls, names: Iterable[str]) -> IgnoreFilter:
        return cls(names=frozenset(names))

    def should_ignore(self, path: Path | str) -> bool:
        name = Path(path).name
        return name in self.names or name.startswith(HIDDEN_PREFIX)
