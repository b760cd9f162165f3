# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Config tree entry points.

Example:
    >>> cfg = construct({'server': {'dev': {'host': 'dev-host'}}})
    >>> cfg = construct('config.yaml')  # str or PathLike: loaded from disk
    >>> assign(cfg.server, 'dev', {'host': 'localhost'})
"""

from __future__ import annotations

from collections.abc import Callable, Hashable
from os import PathLike
from typing import Any

from .exceptions import InvalidInputError
from .loader import load_document
from .materializer import is_composite, materialize
from .node import ConfigArray, ConfigNode, ReactiveContainer

DocumentLoader = Callable[[Any], Any]


def _root(value: Any) -> ConfigNode | ConfigArray:
    if not is_composite(value):
        raise InvalidInputError(
            f"Invalid config type. Expecting a mapping or a sequence; "
            f"got '{type(value).__name__}'"
        )
    return materialize(value)


def construct(
    source: Any, loader: DocumentLoader = load_document
) -> ConfigNode | ConfigArray:
    """Build a config tree.

    Args:
        source: A mapping or sequence, used directly, or a str/PathLike
            naming a document to load.
        loader: Callable turning a path into plain data.

    Returns:
        The root ConfigNode (mapping source) or ConfigArray (sequence source).

    Raises:
        InvalidInputError: If the data is not a mapping or a sequence.
        DocumentIOError: If the document cannot be read.
        DocumentParseError: If the document is malformed.
    """
    if isinstance(source, (str, PathLike)):
        return load(source, loader)
    return _root(source)


def load(
    path: str | PathLike, loader: DocumentLoader = load_document
) -> ConfigNode | ConfigArray:
    """Build a config tree from the document at ``path``."""
    return _root(loader(path))


def assign(node: ReactiveContainer, key: Hashable, value: Any) -> ReactiveContainer:
    """Set ``node[key] = value`` and return ``node``.

    Same as ``node.set_item(key, value)``: the old composite at ``key`` is
    detached, ``value`` is materialized and one change is emitted.
    """
    if not isinstance(node, ReactiveContainer):
        raise TypeError(
            f"assign() expects a ConfigNode or ConfigArray, not {type(node).__name__}"
        )
    return node.set_item(key, value)
