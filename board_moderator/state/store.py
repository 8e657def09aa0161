# ABOUTME: Authoritative, path-addressable game document with dot-path get/set primitives.
# ABOUTME: Snapshots are deep copies so readers never observe a half-applied batch.

import copy
from typing import Any

from loguru import logger


class _Missing:
    """Sentinel for an unresolvable path"""

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


def split_path(path: str) -> list[str]:
    """
    Split a dot path into segments.

    Args:
        path: Dot-separated path such as "players.p1.position"

    Returns:
        List of path segments

    Raises:
        ValueError: If the path is empty or contains an empty segment
    """
    parts = path.split(".")
    if not path or any(part == "" for part in parts):
        raise ValueError(f"Invalid state path: '{path}'")
    return parts


def _step(current: Any, part: str) -> Any:
    if isinstance(current, dict):
        return current.get(part, MISSING)
    if isinstance(current, list) and part.isdigit():
        index = int(part)
        return current[index] if index < len(current) else MISSING
    return MISSING


def get_by_path(document: dict[str, Any], path: str) -> Any:
    """
    Resolve a dot path inside a document.

    Numeric segments index into lists, every other segment is a mapping key.
    A key holding None resolves to None; only absent keys are MISSING.

    Args:
        document: Game state document
        path: Dot-separated path

    Returns:
        The value at the path, or MISSING when it does not resolve
    """
    current: Any = document
    for part in split_path(path):
        current = _step(current, part)
        if current is MISSING:
            return MISSING
    return current


def path_exists(document: dict[str, Any], path: str) -> bool:
    """Return True when the path resolves to a value (None included)"""
    try:
        return get_by_path(document, path) is not MISSING
    except ValueError:
        return False


def set_by_path(document: dict[str, Any], path: str, value: Any) -> None:
    """
    Write a value at a dot path, in place.

    The parent container must already exist; the final key may be new when the
    parent is a mapping.

    Args:
        document: Game state document (mutated)
        path: Dot-separated path
        value: Value to store

    Raises:
        KeyError: If the parent container does not resolve
    """
    parts = split_path(path)
    parent: Any = document
    for part in parts[:-1]:
        parent = _step(parent, part)
        if parent is MISSING or not isinstance(parent, (dict, list)):
            raise KeyError(f"Parent of '{path}' does not exist")

    last = parts[-1]
    if isinstance(parent, list):
        if not last.isdigit() or int(last) >= len(parent):
            raise KeyError(f"Index '{last}' out of range for '{path}'")
        parent[int(last)] = value
    else:
        parent[last] = value


class StateStore:
    """
    Holds the authoritative game state document.

    Only the orchestrator's commit step and the turn manager write to it;
    every other component works from snapshot() copies.
    """

    def __init__(self, initial_state: dict[str, Any]):
        """
        Initialize the store.

        Args:
            initial_state: Game definition's initial state (copied, never aliased)
        """
        self._initial = copy.deepcopy(initial_state)
        self._state = copy.deepcopy(initial_state)

    @property
    def initial_state(self) -> dict[str, Any]:
        """Copy of the state the store was created with"""
        return copy.deepcopy(self._initial)

    def snapshot(self) -> dict[str, Any]:
        """Return a deep copy of the current document"""
        return copy.deepcopy(self._state)

    def get(self, path: str, default: Any = None) -> Any:
        """Read a value by path, returning default when it does not resolve"""
        value = get_by_path(self._state, path)
        return default if value is MISSING else value

    def exists(self, path: str) -> bool:
        return path_exists(self._state, path)

    def set(self, path: str, value: Any) -> None:
        """Write one value by path"""
        set_by_path(self._state, path, value)
        logger.debug(f"State set: {path} = {value!r}")

    def replace(self, new_state: dict[str, Any]) -> None:
        """Swap in a fully validated document"""
        self._state = copy.deepcopy(new_state)

    def reset(self) -> None:
        """Restore the initial document"""
        self._state = copy.deepcopy(self._initial)
        logger.info("State reset to initial document")
