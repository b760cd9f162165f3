# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Conversion of plain nested data into reactive containers.

Mappings become ConfigNode, lists/tuples (any non-string sequence) become
ConfigArray, everything else is kept as-is. Containers are always copied:
materializing a ConfigNode yields a new, independent ConfigNode, so the same
input can feed any number of trees and no two trees share a bus.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Mapping, Sequence
from typing import Any

from .exceptions import InvalidInputError
from .node import ConfigArray, ConfigNode, ReactiveContainer


def is_sequence(value: Any) -> bool:
    """True for list-like values; strings and bytes are scalars."""
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def is_composite(value: Any) -> bool:
    """True if ``value`` would be materialized into a container."""
    return isinstance(value, Mapping) or is_sequence(value)


def materialize(value: Any, _active: set[int] | None = None) -> Any:
    """Convert ``value`` into a reactive tree.

    Args:
        value: Plain value. Mappings and sequences are converted recursively.
        _active: Internal use for cycle detection.

    Returns:
        A new ConfigNode or ConfigArray, or ``value`` unchanged if scalar.

    Raises:
        InvalidInputError: If ``value`` contains itself.

    Example:
        >>> materialize({'a': [1, {'b': 2}]})
        ConfigNode({'a': ConfigArray([1, ConfigNode({'b': 2})])})
        >>> materialize('text')
        'text'
    """
    if isinstance(value, Mapping):
        container: ReactiveContainer = ConfigNode()
    elif is_sequence(value):
        container = ConfigArray()
    else:
        return value
    populate(container, value, _active)
    return container


def populate(
    container: ReactiveContainer,
    source: Any,
    _active: set[int] | None = None,
) -> None:
    """Fill an empty container from ``source`` without emitting changes.

    Args:
        container: An empty ConfigNode or ConfigArray.
        source: Mapping for a ConfigNode, sequence for a ConfigArray.
        _active: Internal use for cycle detection.

    Raises:
        InvalidInputError: If ``source`` has the wrong shape or is cyclic.
        ValueError: If ``container`` is not empty.
    """
    entries: Iterable[tuple[Hashable, Any]]
    if isinstance(container, ConfigNode):
        if not isinstance(source, Mapping):
            raise InvalidInputError(
                f"ConfigNode source must be a mapping, not {type(source).__name__}"
            )
        entries = source.items()
    else:
        if not is_sequence(source):
            raise InvalidInputError(
                f"ConfigArray source must be a sequence, not {type(source).__name__}"
            )
        entries = enumerate(source)

    if len(container):
        raise ValueError(f"Cannot populate a non-empty {type(container).__name__}")

    if _active is None:
        _active = set()
    marker = id(source)
    if marker in _active:
        raise InvalidInputError(
            f"Cyclic reference: {type(source).__name__} contains itself"
        )
    _active.add(marker)
    try:
        loaded = [(key, materialize(value, _active)) for key, value in entries]
    finally:
        _active.discard(marker)
    container._load(loaded)
