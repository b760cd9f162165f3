# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Change records emitted by config containers.

A Change describes one mutated slot. The path is relative to the container
that emits the record: the mutated container emits ``('host',)``, its parent
``('dev', 'host')``, the root ``('server', 'dev', 'host')``.

Example:
    >>> change = Change(('host',), 'old-host', 'new-host')
    >>> change.prefixed('dev').path
    ('dev', 'host')
    >>> path, old, new = change
"""

from __future__ import annotations

from typing import Any, Hashable, NamedTuple


class _Missing:
    """Marker for a slot that does not exist."""

    __slots__ = ()

    def __repr__(self) -> str:
        return 'MISSING'

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> str:
        return 'MISSING'


MISSING: Any = _Missing()


class Change(NamedTuple):
    """One mutation, as seen from the emitting container.

    Attributes:
        path: Keys/indices from the emitting container down to the mutated slot.
        old_value: Previous value, or MISSING if the slot was created.
        new_value: Current value, or MISSING if the slot was deleted.
    """

    path: tuple[Hashable, ...]
    old_value: Any
    new_value: Any

    def prefixed(self, key: Hashable) -> Change:
        """Return the same change seen from one level above."""
        return self._replace(path=(key, *self.path))

    @property
    def dotted_path(self) -> str:
        """Path as a dotted string, e.g. 'plugins.0.name'."""
        return '.'.join(str(k) for k in self.path)

    @property
    def is_insert(self) -> bool:
        return self.old_value is MISSING

    @property
    def is_delete(self) -> bool:
        return self.new_value is MISSING
