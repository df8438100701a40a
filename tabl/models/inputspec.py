"""
Module: inputspec
Purpose: User intent describing which tabular files to operate on.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Tuple

DEFAULT_EXTENSIONS = frozenset({"parquet"})


@dataclass(frozen=True)
class InputSpec:
    """
    Explicit paths (or None for the current directory) plus traversal flags.
    """

    paths: Optional[Tuple[str, ...]] = None
    recursive: bool = False
    resolve_symlinks: bool = False
    extensions: FrozenSet[str] = field(default=DEFAULT_EXTENSIONS)

    @classmethod
    def from_args(
        cls,
        paths: list[str] | None,
        recursive: bool = False,
        resolve_symlinks: bool = False,
    ) -> "InputSpec":
        return cls(
            paths=tuple(paths) if paths else None,
            recursive=recursive,
            resolve_symlinks=resolve_symlinks,
        )
