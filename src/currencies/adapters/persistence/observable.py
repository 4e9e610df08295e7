# src/currencies/adapters/persistence/observable.py
"""
Observable Values - Push-Based Observation of Namespace Contents

An ObservableValue wraps a reader over one namespace (usually a single
key) and pushes the read value to subscribers:

- the first subscriber attaches the observable to the namespace's
  ChangeDispatcher, the last one to leave detaches it;
- every subscriber receives the current value as soon as it subscribes;
- after each commit to the namespace the value is re-read and emitted
  only if it differs from the value emitted last.

Dispatch runs under the namespace write lock, so emissions follow commit
order even when writes come from several threads.

Files that USE this module:
- currencies.adapters.persistence.namespaced_store (NamespacedStore.observe, ChangeDispatcher)
- currencies.application.rate_cache (whole-namespace snapshot observable)
- currencies.application.database (observable preferences)

Files that this module USES:
- None (pure in-process publish/subscribe)
"""
from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any, Callable, FrozenSet, Generic, List, TypeVar

if TYPE_CHECKING:
    from currencies.adapters.persistence.namespaced_store import NamespacedStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

_UNSET = object()


class ChangeDispatcher:
    """Fans out commit notifications of one namespace to attached observables."""

    def __init__(self, lock: threading.RLock):
        self._lock = lock
        self._observers: List["ObservableValue[Any]"] = []

    def __len__(self) -> int:
        return len(self._observers)

    def attach(self, observer: "ObservableValue[Any]") -> None:
        with self._lock:
            if observer not in self._observers:
                self._observers.append(observer)

    def detach(self, observer: "ObservableValue[Any]") -> None:
        with self._lock:
            if observer in self._observers:
                self._observers.remove(observer)

    def dispatch(self, changed_keys: FrozenSet[str]) -> None:
        """Notify every attached observable that a commit happened."""
        with self._lock:
            for observer in list(self._observers):
                observer.on_change(changed_keys)


class Subscription:
    """Handle returned by ObservableValue.subscribe(); dispose() to stop receiving."""

    def __init__(self, observable: "ObservableValue[Any]", callback: Callable[[Any], None]):
        self._observable = observable
        self.callback = callback
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def dispose(self) -> None:
        """Stop receiving values. Calling it again has no effect."""
        if self._active:
            self._active = False
            self._observable._unsubscribe(self)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()


class ObservableValue(Generic[T]):
    """A value read from a namespace, pushed to subscribers when it changes."""

    def __init__(self, store: "NamespacedStore", reader: Callable[[], T], name: str = ""):
        """
        Args:
            store: Namespace the value is read from
            reader: Reads the current value from the store
            name: Label used in logs
        """
        self._store = store
        self._reader = reader
        self.name = name or store.name
        self._subscriptions: List[Subscription] = []
        self._last: Any = _UNSET
        self._emitting = False
        self._pending = False

    def __repr__(self) -> str:
        return f"ObservableValue({self.name!r}, subscribers={len(self._subscriptions)})"

    @property
    def value(self) -> T:
        """Last emitted value while subscribed, otherwise a fresh read."""
        with self._store.lock:
            if self._last is _UNSET:
                return self._reader()
            return self._last

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def subscribe(self, callback: Callable[[T], None]) -> Subscription:
        """
        Start receiving values.

        The callback is invoked immediately with the current value and then
        after every commit that changes it.

        Returns:
            Subscription to dispose when no longer interested
        """
        subscription = Subscription(self, callback)
        with self._store.lock:
            if not self._subscriptions:
                self._last = self._reader()
                self._store.dispatcher.attach(self)
                logger.debug("Observable %s attached", self.name)
            self._subscriptions.append(subscription)
            self._deliver(subscription, self._last)
        return subscription

    def _unsubscribe(self, subscription: Subscription) -> None:
        with self._store.lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)
            if not self._subscriptions and self._last is not _UNSET:
                self._store.dispatcher.detach(self)
                self._last = _UNSET
                logger.debug("Observable %s detached", self.name)

    def on_change(self, changed_keys: FrozenSet[str]) -> None:
        """
        Re-read after a commit and emit if the value differs from the last one.

        A commit made by a subscriber while a value is being fanned out is
        only recorded; the value is re-read once every subscriber has
        received the current one, so all subscribers see the same order.
        """
        if self._emitting:
            self._pending = True
            return

        self._emitting = True
        try:
            while self._subscriptions:
                self._pending = False
                new_value = self._reader()
                if self._last is _UNSET or new_value != self._last:
                    self._last = new_value
                    for subscription in list(self._subscriptions):
                        self._deliver(subscription, new_value)
                if not self._pending:
                    break
        finally:
            self._emitting = False

    def _deliver(self, subscription: Subscription, value: Any) -> None:
        if not subscription.active:
            return
        try:
            subscription.callback(value)
        except Exception as e:
            logger.error("Subscriber of %s failed: %s", self.name, e, exc_info=True)
