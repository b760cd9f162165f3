# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""ConfigTree - Reactive configuration trees.

Nested mappings and lists, loaded from YAML/JSON documents or given in
memory, become a tree of ConfigNode/ConfigArray containers. Every mutation
emits a 'change' event on the mutated container and on each of its
ancestors.
"""

__version__ = "0.1.0"

from .bus import ChangeBus
from .change import MISSING, Change
from .config import assign, construct, load
from .exceptions import (
    ConfigTreeError,
    DocumentError,
    DocumentIOError,
    DocumentParseError,
    InvalidInputError,
    UnknownEventError,
)
from .loader import load_document
from .materializer import is_composite, materialize, populate
from .node import ConfigArray, ConfigNode, ReactiveContainer

__all__ = [
    # Entry points
    "construct",
    "load",
    "assign",
    # Containers
    "ConfigNode",
    "ConfigArray",
    "ReactiveContainer",
    # Events
    "ChangeBus",
    "Change",
    "MISSING",
    # Materialization
    "materialize",
    "populate",
    "is_composite",
    "load_document",
    # Exceptions
    "ConfigTreeError",
    "InvalidInputError",
    "UnknownEventError",
    "DocumentError",
    "DocumentParseError",
    "DocumentIOError",
]
