# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""ChangeBus - per-container publish/subscribe.

Every ConfigNode and ConfigArray owns exactly one ChangeBus. Listeners are
called synchronously, in registration order, with the emitted payload as
their only argument.

Failure policy:
    A listener that raises does not stop the emission. The exception is
    logged through this module's logger and the remaining listeners run.

Relay:
    A container forwards its changes to its parent through a single relay
    slot, kept apart from the listeners: ``off``, ``once`` and
    ``listener_count`` never see it.

Closing:
    When a container is detached from its tree its bus is closed. A closed
    bus drops all listeners and ``emit`` becomes a no-op, so a stale subtree
    can never produce events.

Example:
    >>> bus = ChangeBus()
    >>> unsubscribe = bus.on('change', print)
    >>> bus.emit('change', 'hello')
    hello
    >>> unsubscribe()
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from .exceptions import UnknownEventError

logger = logging.getLogger(__name__)

Listener = Callable[[Any], Any]

EVENTS = ('change',)


class _Registration:
    """A listener entry. Identity distinguishes repeated registrations."""

    __slots__ = ('callback', 'once')

    def __init__(self, callback: Listener, once: bool) -> None:
        self.callback = callback
        self.once = once


class ChangeBus:
    """Synchronous event emitter for a fixed set of event names."""

    __slots__ = ('_listeners', '_relay', '_closed')

    def __init__(self) -> None:
        self._listeners: dict[str, list[_Registration]] = {
            event: [] for event in EVENTS
        }
        self._relay: Listener | None = None
        self._closed = False

    def __repr__(self) -> str:
        state = 'closed' if self._closed else f'{self.listener_count()} listeners'
        return f"ChangeBus({state})"

    def _registrations(self, event: str) -> list[_Registration]:
        try:
            return self._listeners[event]
        except KeyError:
            raise UnknownEventError(
                f"Unknown event '{event}', expected one of {EVENTS}"
            ) from None

    def _add(self, event: str, callback: Listener, once: bool) -> Callable[[], None]:
        if not callable(callback):
            raise TypeError(f"Listener must be callable, not {type(callback).__name__}")
        registrations = self._registrations(event)
        registration = _Registration(callback, once)
        registrations.append(registration)

        def unsubscribe() -> None:
            if registration in registrations:
                registrations.remove(registration)

        return unsubscribe

    def on(self, event: str, callback: Listener) -> Callable[[], None]:
        """Register a persistent listener.

        Args:
            event: Event name.
            callback: Called with the payload of every emission.

        Returns:
            A zero-argument function removing this registration.
        """
        return self._add(event, callback, once=False)

    def once(self, event: str, callback: Listener) -> Callable[[], None]:
        """Register a listener that is removed before its first call."""
        return self._add(event, callback, once=True)

    def off(self, event: str, callback: Listener | None = None) -> None:
        """Remove listeners.

        Args:
            event: Event name.
            callback: Listener to remove, including ``once`` registrations.
                If None, every listener of ``event`` is removed.
        """
        registrations = self._registrations(event)
        if callback is None:
            registrations.clear()
            return
        registrations[:] = [r for r in registrations if r.callback != callback]

    def emit(self, event: str, payload: Any = None) -> None:
        """Call every listener currently registered for ``event``.

        Listeners removed by an earlier listener of the same emission are
        skipped; listeners added during the emission are not called.
        """
        registrations = self._registrations(event)
        if self._closed:
            return
        for registration in list(registrations):
            if registration not in registrations:
                continue
            if registration.once:
                registrations.remove(registration)
            try:
                registration.callback(payload)
            except Exception:
                logger.exception(
                    "Listener %r failed while handling '%s'",
                    registration.callback, event,
                )
        relay = self._relay
        if relay is not None and event == 'change':
            try:
                relay(payload)
            except Exception:
                logger.exception("Relay %r failed while handling '%s'", relay, event)

    def close(self) -> None:
        """Drop every listener and silence the bus for good."""
        for registrations in self._listeners.values():
            registrations.clear()
        self._relay = None
        self._closed = True

    def relay_to(self, callback: Listener) -> None:
        """Forward every 'change' payload to ``callback`` after the listeners."""
        self._relay = callback

    def unrelay(self) -> None:
        """Stop forwarding changes."""
        self._relay = None

    @property
    def relayed(self) -> bool:
        """True while changes are forwarded to a parent container."""
        return self._relay is not None

    @property
    def closed(self) -> bool:
        """True once the owning container has been detached."""
        return self._closed

    def listener_count(self, event: str | None = None) -> int:
        """Number of listeners for ``event``, or for all events if None."""
        if event is not None:
            return len(self._registrations(event))
        return sum(len(r) for r in self._listeners.values())
