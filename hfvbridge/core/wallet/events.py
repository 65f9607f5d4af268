"""Publish/subscribe channel for wallet session events."""

import logging
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Type

from .models import AccountsChanged, ChainChanged, Disconnected, WalletEvent

WalletListener = Callable[[WalletEvent], None]

ALL_EVENTS: Tuple[Type, ...] = (AccountsChanged, ChainChanged, Disconnected)


class WalletEventBus:
    """
    Synchronous, typed event delivery.

    A listener registered more than once is still called once per event, and
    each published event reaches each listener exactly once. A listener that
    raises is logged and does not stop delivery to the others.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self._listeners: Dict[WalletListener, Tuple[Type, ...]] = {}

    def subscribe(
        self,
        listener: WalletListener,
        events: Optional[Iterable[Type]] = None,
    ) -> Callable[[], None]:
        """Register ``listener`` and return a callable that unsubscribes it."""

        kinds = tuple(events) if events is not None else ALL_EVENTS
        if listener in self._listeners:
            merged = set(self._listeners[listener]) | set(kinds)
            kinds = tuple(kind for kind in ALL_EVENTS if kind in merged)
        self._listeners[listener] = kinds
        return lambda: self.unsubscribe(listener)

    def unsubscribe(self, listener: WalletListener) -> None:
        self._listeners.pop(listener, None)

    def publish(self, event: WalletEvent) -> int:
        """Deliver ``event``; returns the number of listeners called."""

        delivered = 0
        for listener, kinds in list(self._listeners.items()):
            if not isinstance(event, kinds):
                continue
            delivered += 1
            try:
                listener(event)
            except Exception as e:
                self.logger.error(f"Wallet listener error on {type(event).__name__}: {e}")
        return delivered

    def clear(self) -> None:
        self._listeners.clear()

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def listeners(self) -> List[WalletListener]:
        return list(self._listeners)
