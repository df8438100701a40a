"""
Module: scanner
Purpose: Resolve user input paths into a deterministic list of tabular files.
"""

import os
from typing import Iterable, List

from .exceptions import EmptySetError, NotFoundError, ScanError
from .models.inputspec import InputSpec
from .utils import log_error, log_warning


def enumerate_files(spec: InputSpec) -> List[str]:
    """
    Expand explicit paths, directories or trees into concrete file paths.

    Args:
        spec: InputSpec describing the requested inputs.

    Returns:
        Absolute, deduplicated file paths in enumeration order.

    Raises:
        NotFoundError: If an explicit path does not exist.
        ScanError: If a directory cannot be listed; partial trees are never returned.
        EmptySetError: If no tabular files match.
    """
    roots = list(spec.paths) if spec.paths else [os.getcwd()]
    extensions = {ext.lower().lstrip(".") for ext in spec.extensions}

    results: List[str] = []
    seen: set[str] = set()

    def _add(path: str) -> None:
        key = _canonical(path, spec.resolve_symlinks)
        if key in seen:
            return
        seen.add(key)
        results.append(key)

    for raw in roots:
        path = os.path.abspath(raw)
        if not os.path.exists(path):
            log_error(f"Path does not exist: {path}")
            raise NotFoundError(path)
        if os.path.isfile(path):
            _add(path)
        elif os.path.isdir(path):
            if spec.recursive:
                children = _walk_tree(path, extensions)
            else:
                children = _list_directory(path, extensions)
            for child in children:
                _add(child)
        else:
            log_error(f"Path is neither a file nor a directory: {path}")
            raise ScanError(f"Path is neither a file nor a directory: {path}")

    if not results:
        locations = ", ".join(os.path.abspath(p) for p in roots)
        mode = "tree" if spec.recursive else "directory"
        raise EmptySetError(f"No tabular files found ({mode} search of {locations})")
    return results


def _canonical(path: str, resolve_symlinks: bool) -> str:
    if resolve_symlinks:
        return os.path.realpath(path)
    return os.path.abspath(path)


def _has_extension(name: str, extensions: set[str]) -> bool:
    _, ext = os.path.splitext(name)
    if not ext:
        return False
    return ext.lstrip(".").lower() in extensions


def _unlistable(path: str, exc: OSError) -> ScanError:
    log_error(f"Cannot list directory {path}: {exc}")
    return ScanError(f"Cannot list directory {path}: {exc.strerror or exc}")


def _raise_unlistable(exc: OSError) -> None:
    raise _unlistable(exc.filename or "?", exc) from exc


def _list_directory(path: str, extensions: set[str]) -> List[str]:
    try:
        names = os.listdir(path)
    except OSError as exc:
        raise _unlistable(path, exc) from exc
    candidates = [os.path.join(path, name) for name in sorted(names)]
    return filter_supported_files([c for c in candidates if os.path.isfile(c)], extensions)


def _walk_tree(path: str, extensions: set[str]) -> List[str]:
    files: List[str] = []
    walker = os.walk(path, topdown=True, onerror=_raise_unlistable, followlinks=False)
    for root, dirs, names in walker:
        safe_dirs: List[str] = []
        for dirname in sorted(dirs):
            dir_path = os.path.join(root, dirname)
            if os.path.islink(dir_path):
                log_warning(f"Skipping symlinked directory during scan: {dir_path}")
                continue
            safe_dirs.append(dirname)
        dirs[:] = safe_dirs
        candidates = [os.path.join(root, name) for name in sorted(names)]
        files.extend(filter_supported_files([c for c in candidates if os.path.isfile(c)], extensions))
    return files


def filter_supported_files(files: Iterable[str], extensions: Iterable[str]) -> List[str]:
    """
    Return only supported files based on extension.

    Args:
        files: File paths to filter.
        extensions: Recognized extensions without the leading dot.

    Returns:
        Filtered list containing only tabular files.
    """
    normalized = {ext.lower().lstrip(".") for ext in extensions}
    return [os.path.abspath(path) for path in files if _has_extension(path, normalized)]
