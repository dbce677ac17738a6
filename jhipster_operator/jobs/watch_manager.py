"""Long-lived change subscriptions that keep the state store live.

One generic `TypedWatchSubscription` runs per kind on its own daemon thread.
When a stream closes or fails it reconnects from the last observed resource
version after an exponential backoff; an expired cursor triggers a re-list of
that kind first.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Iterable

from jhipster_operator.adapters import (
    ClusterAdapterError,
    ClusterAdapterPort,
    ClusterWatchExpiredError,
    WatchRetryStrategy,
)
from jhipster_operator.domain import (
    APP_LABEL_KEY,
    SUBORDINATE_KINDS,
    ApplicationRecord,
    ResourceKind,
    SubordinateRecord,
    WatchAction,
    WatchEvent,
)
from jhipster_operator.store import ApplicationStateStore, WatchCursorRegistry

logger = logging.getLogger(__name__)

RecordHandler = Callable[[ApplicationRecord | SubordinateRecord], None]
KindReloader = Callable[[ResourceKind], None]


@dataclass(frozen=True)
class WatchEventHandlers:
    """Handler capability set for one subscription.

    Attributes:
        on_added: Called for ADDED events.
        on_deleted: Called for DELETED events.
    """

    on_added: RecordHandler
    on_deleted: RecordHandler


class TypedWatchSubscription:
    """Watch of one resource kind resumed from the kind's cursor."""

    def __init__(
        self,
        kind: ResourceKind,
        cluster_adapter: ClusterAdapterPort,
        cursor_registry: WatchCursorRegistry,
        handlers: WatchEventHandlers,
        retry_strategy: WatchRetryStrategy | None = None,
        reload_kind: KindReloader | None = None,
        timeout_seconds: int | None = None,
        stop_join_timeout_seconds: float = 5.0,
    ):
        """Initialize one typed subscription.

        Args:
            kind: Watched resource kind.
            cluster_adapter: Adapter providing the event stream.
            cursor_registry: Shared cursor registry advanced after every handled event.
            handlers: ADDED/DELETED handlers.
            retry_strategy: Reconnect backoff; defaults to `WatchRetryStrategy()`.
            reload_kind: Optional re-list callback used when the cursor expired.
            timeout_seconds: Optional server-side stream timeout.
            stop_join_timeout_seconds: Upper bound on waiting for the thread to exit on stop.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when required dependencies are missing.
        """

        if cluster_adapter is None:
            raise ValueError("cluster_adapter must not be None")
        if cursor_registry is None:
            raise ValueError("cursor_registry must not be None")
        if handlers is None:
            raise ValueError("handlers must not be None")

        self._kind = kind
        self._cluster_adapter = cluster_adapter
        self._cursor_registry = cursor_registry
        self._handlers = handlers
        self._retry_strategy = retry_strategy or WatchRetryStrategy()
        self._reload_kind = reload_kind
        self._timeout_seconds = timeout_seconds
        self._stop_join_timeout_seconds = stop_join_timeout_seconds
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._registered = False

    def subscription_is_registered(self) -> bool:
        return self._registered

    def subscription_start(self) -> None:
        """Start the watch thread once; later calls are no-ops while it runs."""

        if self._registered:
            return
        if self._thread is not None and self._thread.is_alive():
            logger.warning("Previous %s watch thread is still draining its stream", self._kind.value)
        logger.info("> Registering %s CRD Watch", self._kind.value)
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self.subscription_run_until_stopped,
            args=(self._stop_event,),
            name=f"watch-{self._kind.value.lower()}",
            daemon=True,
        )
        self._registered = True
        self._thread.start()

    def subscription_stop(self) -> None:
        """Stop the watch thread and wait a bounded time for it to exit.

        A thread still blocked in its stream after the wait exits on the next
        event or stream end; it no longer dispatches events or re-lists.
        """

        self._stop_event.set()
        self._registered = False
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self._stop_join_timeout_seconds)

    def subscription_run_until_stopped(self, stop_event: threading.Event | None = None) -> None:
        """Consume streams, reconnecting with backoff until stopped.

        Args:
            stop_event: Event ending this run; defaults to the subscription's current one.
        """

        stop_event = stop_event or self._stop_event
        failure_index = 0
        while not stop_event.is_set():
            resource_version = self._cursor_registry.cursor_get(self._kind)
            try:
                self.subscription_consume(
                    self._cluster_adapter.adapter_watch(
                        kind=self._kind,
                        resource_version=resource_version,
                        timeout_seconds=self._timeout_seconds,
                    ),
                    stop_event=stop_event,
                )
                failure_index = 0
                continue
            except ClusterWatchExpiredError:
                logger.warning("%s watch resourceVersion=%s expired, re-listing", self._kind.value, resource_version)
                if stop_event.is_set():
                    break
                if self._subscription_reload():
                    failure_index = 0
                    continue
            except Exception:  # pylint: disable=broad-except
                logger.exception("%s watch failed at resourceVersion=%s", self._kind.value, resource_version)

            wait_seconds = self._retry_strategy.strategy_calculate_retry_wait_seconds(retry_index=failure_index)
            failure_index += 1
            logger.warning(
                "Reconnecting %s watch from resourceVersion=%s in %.2fs",
                self._kind.value,
                self._cursor_registry.cursor_get(self._kind),
                wait_seconds,
            )
            stop_event.wait(wait_seconds)

    def subscription_consume(self, events: Iterable[WatchEvent], stop_event: threading.Event | None = None) -> int:
        """Dispatch events until the stream ends or the subscription is stopped.

        Returns:
            int: Number of events dispatched.
        """

        stop_event = stop_event or self._stop_event
        dispatched = 0
        for event in events:
            if stop_event.is_set():
                break
            self.subscription_dispatch(event)
            dispatched += 1
        return dispatched

    def subscription_dispatch(self, event: WatchEvent) -> None:
        """Route one event to its handler, then advance the cursor.

        The cursor only moves after the handler returned, so a failing handler
        makes the reconnect replay the event.
        """

        record = event.record
        if not record.spec_present:
            logger.warning("No Spec for %s resource %s", self._kind.value, record.name)
        elif event.action is WatchAction.ADDED:
            self._handlers.on_added(record)
        elif event.action is WatchAction.DELETED:
            self._handlers.on_deleted(record)

        self._cursor_registry.cursor_advance(self._kind, event.resource_version or record.resource_version)

    def _subscription_reload(self) -> bool:
        self._cursor_registry.cursor_reset(self._kind)
        if self._reload_kind is None:
            return True
        try:
            self._reload_kind(self._kind)
        except (ClusterAdapterError, ConnectionError, TimeoutError):
            logger.exception("%s re-list after expired watch failed", self._kind.value)
            return False
        return True


class WatchManager:
    """Owns the four subscriptions and the state-store event handlers."""

    def __init__(
        self,
        cluster_adapter: ClusterAdapterPort,
        state_store: ApplicationStateStore,
        cursor_registry: WatchCursorRegistry,
        retry_strategy: WatchRetryStrategy | None = None,
        reload_kind: KindReloader | None = None,
        timeout_seconds: int | None = None,
    ):
        if cluster_adapter is None:
            raise ValueError("cluster_adapter must not be None")
        if state_store is None:
            raise ValueError("state_store must not be None")

        self._cluster_adapter = cluster_adapter
        self._state_store = state_store
        self._cursor_registry = cursor_registry
        self._subscriptions: dict[ResourceKind, TypedWatchSubscription] = {
            kind: TypedWatchSubscription(
                kind=kind,
                cluster_adapter=cluster_adapter,
                cursor_registry=cursor_registry,
                handlers=self._job_handlers_for_kind(kind),
                retry_strategy=retry_strategy,
                reload_kind=reload_kind,
                timeout_seconds=timeout_seconds,
            )
            for kind in ResourceKind
        }

    def job_start_watches(self) -> bool:
        """Start every subscription that is not running yet.

        Returns:
            bool: True when all four subscriptions are registered.
        """

        for subscription in self._subscriptions.values():
            if not subscription.subscription_is_registered():
                subscription.subscription_start()

        if self.job_all_registered():
            logger.info("> All CRD watches registered, init complete")
            return True
        logger.error("> CRD watches missing, check your installation and run init again")
        return False

    def job_stop_watches(self) -> None:
        for subscription in self._subscriptions.values():
            subscription.subscription_stop()

    def job_all_registered(self) -> bool:
        return all(subscription.subscription_is_registered() for subscription in self._subscriptions.values())

    def job_registration_state(self) -> dict[str, bool]:
        """Return registration flag per kind name."""

        return {kind.value: subscription.subscription_is_registered() for kind, subscription in self._subscriptions.items()}

    def job_cursor_state(self) -> dict[str, str | None]:
        """Return the resume resource version per kind name, None before the first listing."""

        cursors = self._cursor_registry.cursor_snapshot()
        return {kind.value: cursors.get(kind) for kind in ResourceKind}

    def job_subscription(self, kind: ResourceKind) -> TypedWatchSubscription:
        return self._subscriptions[kind]

    def job_handle_application_added(self, record: ApplicationRecord) -> None:
        """Track an application and backfill subordinates already labeled with its name.

        Subordinates are listed before the store lock is taken; the insert and
        every attachment then happen as one store transaction. Listed records
        whose name saw a watch event after the listing started are skipped, so
        a concurrent DELETED is never undone.

        Raises:
            ClusterAdapterError: Raised when a backfill list call fails.
        """

        logger.info(">> Adding App: %s", record.name)
        label_selector = f"{APP_LABEL_KEY}={record.name}"
        change_marker = self._state_store.store_change_marker()
        backfilled: list[SubordinateRecord] = []
        for kind in SUBORDINATE_KINDS:
            listing = self._cluster_adapter.adapter_list(kind, label_selector=label_selector)
            backfilled.extend(item for item in listing.items if item.spec_present)

        with self._state_store.store_transaction() as store:
            store.store_put_application(record)
            for subordinate in backfilled:
                if not store.store_attach_if_unchanged(subordinate, since_marker=change_marker):
                    logger.info(
                        "Skipping backfill of %s %s, changed while listing",
                        subordinate.kind.value,
                        subordinate.name,
                    )

    def job_handle_application_deleted(self, record: ApplicationRecord) -> None:
        logger.info(">> Deleting App: %s", record.name)
        self._state_store.store_remove_application(record.name)

    def job_handle_subordinate_added(self, record: SubordinateRecord) -> None:
        if not self._state_store.store_attach_subordinate(record):
            logger.warning("%s %s has no app label and is not associated", record.kind.value, record.name)

    def job_handle_subordinate_deleted(self, record: SubordinateRecord) -> None:
        self._state_store.store_detach_subordinate(record)

    def _job_handlers_for_kind(self, kind: ResourceKind) -> WatchEventHandlers:
        if kind is ResourceKind.APPLICATION:
            return WatchEventHandlers(
                on_added=self.job_handle_application_added,
                on_deleted=self.job_handle_application_deleted,
            )
        return WatchEventHandlers(
            on_added=self.job_handle_subordinate_added,
            on_deleted=self.job_handle_subordinate_deleted,
        )
