# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Reactive config containers.

This module provides the two container types a config tree is made of:

    - **ConfigNode**: a MutableMapping, built from mappings
    - **ConfigArray**: a MutableSequence, built from lists and tuples

Both share ReactiveContainer, which carries the container's ChangeBus and
the propagation machinery:

    - Every write or delete emits a Change on the container's own bus.
    - A parent listens on each composite child's bus and re-emits the child's
      changes with the child's key prepended to the path, so a mutation at
      depth d is seen at all d+1 levels up to the root.
    - Children hold no reference to their parent. When a slot holding a
      composite is overwritten or deleted, the parent removes its listener
      from the child and the child recursively detaches its own subtree.
      A detached container keeps working as a plain container but its bus
      is closed and never emits again.

Example:
    >>> cfg = ConfigNode({'server': {'dev': {'host': 'dev-host'}}})
    >>> unsubscribe = cfg.on('change', print)
    >>> cfg.server.dev.host = 'localhost'
    Change(path=('server', 'dev', 'host'), old_value='dev-host', new_value='localhost')
"""

from __future__ import annotations

import functools
import logging
import re
import weakref
from collections.abc import (
    Hashable,
    Iterable,
    Iterator,
    Mapping,
    MutableMapping,
    MutableSequence,
    Sequence,
)
from typing import Any, Callable

from .bus import ChangeBus, Listener
from .change import MISSING, Change

logger = logging.getLogger(__name__)


def _materialize(value: Any) -> Any:
    from .materializer import materialize
    return materialize(value)


def _to_plain(value: Any) -> Any:
    if isinstance(value, ReactiveContainer):
        return value.to_plain()
    return value


def _same_value(old: Any, new: Any) -> bool:
    """True if storing ``new`` over ``old`` changes nothing."""
    if old is new:
        return True
    if isinstance(old, ReactiveContainer) or isinstance(new, ReactiveContainer):
        return False
    if old is MISSING or new is MISSING or type(old) is not type(new):
        return False
    return bool(old == new)


class ReactiveContainer:
    """Event and propagation support shared by ConfigNode and ConfigArray.

    Subclasses store their slots and implement ``_slots``, ``_coerce_key``,
    ``_load`` and ``to_plain``.
    """

    __slots__ = ('_bus', '_attached', '__weakref__')

    def __init__(self) -> None:
        self._bus = ChangeBus()
        self._attached = True

    # ==================== Events ====================

    def on(self, event: str, callback: Listener) -> Callable[[], None]:
        """Subscribe to ``event`` ('change'). Returns an unsubscribe function."""
        return self._bus.on(event, callback)

    def once(self, event: str, callback: Listener) -> Callable[[], None]:
        """Subscribe to the next ``event`` only."""
        return self._bus.once(event, callback)

    def off(self, event: str, callback: Listener | None = None) -> None:
        """Unsubscribe ``callback``, or every listener of ``event``."""
        self._bus.off(event, callback)

    @property
    def bus(self) -> ChangeBus:
        """The ChangeBus owned by this container."""
        return self._bus

    @property
    def attached(self) -> bool:
        """False once this container was replaced or removed from its tree."""
        return self._attached

    # ==================== Mutation ====================

    def set_item(self, key: Hashable, value: Any) -> ReactiveContainer:
        """Set ``key`` to ``value`` and return self for chaining.

        Same as ``self[key] = value``: the value is materialized, the previous
        composite at ``key`` (if any) is detached and one change is emitted.

        Example:
            >>> cfg.server.set_item('dev', {'host': 'localhost'}).set_item('port', 80)
        """
        self[key] = value
        return self

    def _notify(self, key: Hashable, old: Any, new: Any) -> None:
        self._bus.emit('change', Change((key,), old, new))

    # ==================== Propagation ====================

    def _adopt(self, child: ReactiveContainer) -> None:
        """Relay ``child``'s changes through this container's bus."""
        if not self._attached:
            child._detach()
            return
        child._bus.relay_to(functools.partial(self._relay, weakref.ref(child)))

    def _relay(self, child_ref: weakref.ref, change: Change) -> None:
        child = child_ref()
        if child is None:
            return
        key = self._key_of(child)
        if key is MISSING:
            return
        self._bus.emit('change', change.prefixed(key))

    def _release(self, child: ReactiveContainer) -> None:
        """Stop relaying ``child`` and detach its whole subtree."""
        child._bus.unrelay()
        child._detach()

    def _detach(self) -> None:
        if not self._attached:
            return
        self._attached = False
        for _key, value in self._slots():
            if isinstance(value, ReactiveContainer):
                self._release(value)
        self._bus.close()
        logger.debug("Detached %s with %d slots", type(self).__name__, len(self))

    def _key_of(self, child: ReactiveContainer) -> Any:
        for key, value in self._slots():
            if value is child:
                return key
        return MISSING

    # ==================== Abstract ====================

    def _slots(self) -> list[tuple[Hashable, Any]]:
        raise NotImplementedError

    def _coerce_key(self, segment: Any) -> Hashable:
        raise NotImplementedError

    def _load(self, entries: Iterable[tuple[Hashable, Any]]) -> None:
        raise NotImplementedError

    def to_plain(self) -> Any:
        raise NotImplementedError

    # ==================== Path Access ====================

    def _traverse(self, path: str | Sequence[Any]) -> tuple[ReactiveContainer, Hashable]:
        """Walk ``path`` down to the container holding its last segment.

        Raises:
            KeyError: If a segment is missing or crosses a leaf.
            IndexError: If an array index is out of range.
        """
        parts = path.split('.') if isinstance(path, str) else list(path)
        if not path or not parts:
            raise KeyError("Empty path")

        current: ReactiveContainer = self
        for i, part in enumerate(parts[:-1]):
            value = current[current._coerce_key(part)]
            if not isinstance(value, ReactiveContainer):
                remaining = '.'.join(str(p) for p in parts[i + 1:])
                raise KeyError(f"'{part}' is a leaf, cannot access '{remaining}'")
            current = value
        return current, current._coerce_key(parts[-1])

    def get_path(self, path: str | Sequence[Any], default: Any = None) -> Any:
        """Get the value at a dotted path.

        Integer segments index arrays. A Change path tuple is accepted too.

        Example:
            >>> cfg.get_path('plugins.0.name')
            'analytics'
            >>> cfg.get_path('server.missing', 'n/a')
            'n/a'
        """
        try:
            container, key = self._traverse(path)
            return container[key]
        except (KeyError, IndexError):
            return default

    def set_path(self, path: str | Sequence[Any], value: Any) -> ReactiveContainer:
        """Set the value at a dotted path. Intermediate levels must exist."""
        container, key = self._traverse(path)
        container.set_item(key, value)
        return self

    def walk(self, _prefix: str = '') -> Iterator[tuple[str, Any]]:
        """Yield (dotted_path, value) for every slot of the tree, depth first.

        Example:
            >>> for path, value in cfg.walk():
            ...     print(path, value)
        """
        for key, value in self._slots():
            path = f"{_prefix}.{key}" if _prefix else str(key)
            yield path, value
            if isinstance(value, ReactiveContainer):
                yield from value.walk(path)

    # ==================== Copy ====================

    def __reduce__(self) -> tuple[Any, ...]:
        # copies and pickles are rebuilt from plain data: fresh, unshared buses
        return (type(self), (self.to_plain(),))


class ConfigNode(ReactiveContainer, MutableMapping):
    """Mapping node of a config tree.

    Behaves like a dict. Values are also reachable as attributes, as long as
    the key does not start with '_' and does not shadow a method
    (``cfg.keys`` is the method, ``cfg['keys']`` the item).

    ``ConfigNode()`` is empty; an explicit non-mapping source, ``None``
    included, raises InvalidInputError.

    Example:
        >>> cfg = ConfigNode({'server': {'port': 80}})
        >>> cfg.server.port
        80
        >>> cfg.server.port = 8080
        >>> cfg == {'server': {'port': 8080}}
        True
    """

    __slots__ = ('_data',)

    def __init__(self, source: Mapping[Hashable, Any] = MISSING) -> None:
        super().__init__()
        self._data: dict[Hashable, Any] = {}
        if source is not MISSING:
            from .materializer import populate
            populate(self, source)

    # ==================== Special Methods ====================

    def __repr__(self) -> str:
        return f"ConfigNode({self._data!r})"

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __getitem__(self, key: Hashable) -> Any:
        return self._data[key]

    def __setitem__(self, key: Hashable, value: Any) -> None:
        new = _materialize(value)
        old = self._data.get(key, MISSING)
        if _same_value(old, new):
            return
        self._data[key] = new
        if isinstance(old, ReactiveContainer):
            self._release(old)
        if isinstance(new, ReactiveContainer):
            self._adopt(new)
        self._notify(key, old, new)

    def __delitem__(self, key: Hashable) -> None:
        old = self._data.pop(key)
        if isinstance(old, ReactiveContainer):
            self._release(old)
        self._notify(key, old, MISSING)

    def __getattr__(self, name: str) -> Any:
        if name.startswith('_'):
            raise AttributeError(
                f"'{type(self).__name__}' object has no attribute '{name}'"
            )
        try:
            return self._data[name]
        except KeyError:
            raise AttributeError(
                f"'{type(self).__name__}' object has no attribute '{name}'"
            ) from None

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith('_'):
            object.__setattr__(self, name, value)
        else:
            self[name] = value

    def __delattr__(self, name: str) -> None:
        if name.startswith('_'):
            object.__delattr__(self, name)
            return
        try:
            del self[name]
        except KeyError:
            raise AttributeError(name) from None

    def popitem(self) -> tuple[Hashable, Any]:
        """Remove and return the last inserted (key, value) pair, like dict."""
        try:
            key = next(reversed(self._data))
        except StopIteration:
            raise KeyError("popitem(): ConfigNode is empty") from None
        value = self._data[key]
        del self[key]
        return key, value

    def __dir__(self) -> list[str]:
        keys = [k for k in self._data if isinstance(k, str) and k.isidentifier()]
        return [*super().__dir__(), *keys]

    # ==================== Internals ====================

    def _slots(self) -> list[tuple[Hashable, Any]]:
        return list(self._data.items())

    def _coerce_key(self, segment: Any) -> Hashable:
        # YAML allows integer keys: 'ports.80' finds {80: ...}
        if segment not in self._data and isinstance(segment, str):
            if re.fullmatch(r'-?[0-9]+', segment) and int(segment) in self._data:
                return int(segment)
        return segment

    def _load(self, entries: Iterable[tuple[Hashable, Any]]) -> None:
        for key, value in entries:
            self._data[key] = value
            if isinstance(value, ReactiveContainer):
                self._adopt(value)

    def to_plain(self) -> dict[Hashable, Any]:
        """Convert to a plain dict (recursive)."""
        return {key: _to_plain(value) for key, value in self._data.items()}


class ConfigArray(ReactiveContainer, MutableSequence):
    """Sequence node of a config tree.

    Behaves like a list. Every mutating operation computes the new contents,
    commits them in one step and emits one change per index whose content
    differs. Growth is reported with ``old_value=MISSING``, truncation with
    ``new_value=MISSING``. Composites that only move (insert, sort, reverse)
    stay attached and bubble with their current index.

    Example:
        >>> arr = ConfigArray(['a', 'b'])
        >>> unsubscribe = arr.on('change', print)
        >>> arr.append('c')
        Change(path=(2,), old_value=MISSING, new_value='c')
    """

    __slots__ = ('_items',)

    def __init__(self, source: Iterable[Any] = MISSING) -> None:
        super().__init__()
        self._items: list[Any] = []
        if source is not MISSING:
            from .materializer import populate
            populate(self, source)

    # ==================== Special Methods ====================

    def __repr__(self) -> str:
        return f"ConfigArray({self._items!r})"

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)

    def __getitem__(self, index: int | slice) -> Any:
        return self._items[index]

    def __setitem__(self, index: int | slice, value: Any) -> None:
        items = list(self._items)
        if isinstance(index, slice):
            items[index] = [_materialize(v) for v in value]
        else:
            items[index] = _materialize(value)
        self._commit(items)

    def __delitem__(self, index: int | slice) -> None:
        items = list(self._items)
        del items[index]
        self._commit(items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (str, bytes, bytearray)) or not isinstance(other, Sequence):
            return NotImplemented
        return self._items == list(other)

    __hash__ = None  # type: ignore[assignment]

    def __imul__(self, n: int) -> ConfigArray:
        copies = [_materialize(v) for _ in range(n - 1) for v in self._items]
        self._commit(list(self._items) + copies if n > 0 else [])
        return self

    # ==================== List API ====================

    def insert(self, index: int, value: Any) -> None:
        items = list(self._items)
        items.insert(index, _materialize(value))
        self._commit(items)

    def extend(self, values: Iterable[Any]) -> None:
        values = list(values)
        self._commit(self._items + [_materialize(v) for v in values])

    def clear(self) -> None:
        self._commit([])

    def reverse(self) -> None:
        self._commit(self._items[::-1])

    def sort(self, *, key: Callable[[Any], Any] | None = None, reverse: bool = False) -> None:
        self._commit(sorted(self._items, key=key, reverse=reverse))

    # ==================== Internals ====================

    def _commit(self, items: list[Any]) -> None:
        """Replace the contents with ``items`` and emit per-index changes."""
        old = self._items
        self._items = items

        kept = {id(v) for v in items if isinstance(v, ReactiveContainer)}
        before = {id(v) for v in old if isinstance(v, ReactiveContainer)}
        for value in old:
            if isinstance(value, ReactiveContainer) and id(value) not in kept:
                self._release(value)
        for value in items:
            if isinstance(value, ReactiveContainer) and id(value) not in before:
                self._adopt(value)

        for index in range(max(len(old), len(items))):
            previous = old[index] if index < len(old) else MISSING
            current = items[index] if index < len(items) else MISSING
            if not _same_value(previous, current):
                self._notify(index, previous, current)

    def _slots(self) -> list[tuple[Hashable, Any]]:
        return list(enumerate(self._items))

    def _coerce_key(self, segment: Any) -> Hashable:
        try:
            return int(segment)
        except (TypeError, ValueError):
            raise KeyError(f"Array index must be an integer, got {segment!r}") from None

    def _load(self, entries: Iterable[tuple[Hashable, Any]]) -> None:
        for _index, value in entries:
            self._items.append(value)
            if isinstance(value, ReactiveContainer):
                self._adopt(value)

    def to_plain(self) -> list[Any]:
        """Convert to a plain list (recursive)."""
        return [_to_plain(value) for value in self._items]
