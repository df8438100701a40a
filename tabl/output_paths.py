"""
Module: output_paths
Purpose: Output path derivation for edit commands and overwrite prechecks.
"""

import os
from typing import Dict, List, Sequence

from .exceptions import OutputPathError, PathCollisionError
from .models.pathmapping import OutputPolicy, PathMapping
from .utils import log_error


def derive_output_paths(inputs: Sequence[str], policy: OutputPolicy) -> PathMapping:
    """
    Compute the output path for each input under an output policy.

    Args:
        inputs: Enumerated input files.
        policy: In-place, directory redirect and/or filename affix settings.

    Returns:
        PathMapping index-aligned with inputs.

    Raises:
        PathCollisionError: If two inputs map to one output, or an output
            would overwrite a different input.
    """
    normalized = [os.path.abspath(path) for path in inputs]
    if policy.in_place:
        return PathMapping(pairs=tuple((path, path) for path in normalized))

    if policy.redirects:
        source_root = common_root(normalized)
        output_root = os.path.abspath(policy.output_dir)
        targets = [
            os.path.join(output_root, os.path.relpath(path, source_root)) for path in normalized
        ]
    else:
        targets = list(normalized)

    if policy.renames:
        targets = [apply_affix(path, policy.prefix, policy.postfix) for path in targets]

    pairs = tuple(zip(normalized, (os.path.abspath(path) for path in targets)))
    check_collisions(pairs)
    return PathMapping(pairs=pairs)


def apply_affix(path: str, prefix: str = "", postfix: str = "") -> str:
    """
    Insert prefix/postfix around the filename stem, keeping the extension.
    """
    directory, filename = os.path.split(path)
    stem, ext = os.path.splitext(filename)
    return os.path.join(directory, f"{prefix}{stem}{postfix}{ext}")


def check_collisions(pairs: Sequence[tuple[str, str]]) -> None:
    """
    Reject mappings where outputs repeat or clobber another input.
    """
    claimed: Dict[str, str] = {}
    input_paths = {src for src, _ in pairs}
    for src, dst in pairs:
        previous = claimed.get(dst)
        if previous is not None:
            log_error(f"Output path collision for {previous} and {src}: {dst}")
            raise PathCollisionError((previous, src), dst)
        claimed[dst] = src
        if dst != src and dst in input_paths:
            log_error(f"Output for {src} would overwrite input {dst}")
            raise PathCollisionError(
                (src, dst),
                dst,
                message=f"Output path collision: writing {src} to {dst} would overwrite another input",
            )


def common_root(paths: Sequence[str]) -> str:
    """
    Deepest directory containing every path.

    Raises:
        OutputPathError: If paths is empty or spans drives.
    """
    if not paths:
        raise OutputPathError("Cannot compute a common root of zero paths")
    parents = [os.path.dirname(os.path.abspath(path)) for path in paths]
    try:
        return os.path.commonpath(parents)
    except ValueError as exc:
        raise OutputPathError(f"Inputs do not share a common root: {exc}") from exc


def display_paths(paths: Sequence[str], absolute: bool = False) -> List[str]:
    """
    Paths relative to their common root, unless absolute is requested.
    """
    if absolute or not paths:
        return list(paths)
    root = common_root(paths)
    return [os.path.relpath(path, root) for path in paths]


def count_existing(outputs: Sequence[str]) -> int:
    """
    Count how many target paths already exist. Read-only.
    """
    return sum(1 for path in outputs if os.path.exists(path))
