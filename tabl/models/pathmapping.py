"""
Module: pathmapping
Purpose: Output policy and input/output path pairs.
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple


@dataclass(frozen=True)
class OutputPolicy:
    """
    Where edited files go. No output_dir means the input's own directory.
    """

    output_dir: Optional[str] = None
    prefix: str = ""
    postfix: str = ""

    @property
    def redirects(self) -> bool:
        return self.output_dir is not None

    @property
    def renames(self) -> bool:
        return bool(self.prefix or self.postfix)

    @property
    def in_place(self) -> bool:
        return not self.redirects and not self.renames


@dataclass(frozen=True)
class PathMapping:
    """
    Index-aligned (input, output) pairs.
    """

    pairs: Tuple[Tuple[str, str], ...]

    @property
    def inputs(self) -> List[str]:
        return [src for src, _ in self.pairs]

    @property
    def outputs(self) -> List[str]:
        return [dst for _, dst in self.pairs]

    def __len__(self) -> int:
        return len(self.pairs)

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(self.pairs)
