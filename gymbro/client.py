# -*- coding: utf-8 -*-
"""Wires the local store, the data manager and the sync client into one app context."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

import httpx

from .config import Settings, settings as default_settings
from .store.backends import FileStorage, KeyValueStorage
from .store.dispatcher import Dispatcher
from .store.local import LocalStore
from .store.manager import DataManager
from .store.plan import PlanConfig
from .sync.client import SyncClient
from .sync.scheduler import PeriodicSync
from .sync.session import Session


@dataclass
class AppContext:
    storage: KeyValueStorage
    store: LocalStore
    manager: DataManager
    sync: SyncClient
    dispatcher: Dispatcher
    config: Settings = field(default_factory=lambda: default_settings)

    def start_periodic_sync(self, interval: Optional[float] = None) -> PeriodicSync:
        """Start pushing every ``interval`` seconds, defaulting to GYMBRO_SYNC_INTERVAL."""
        worker = PeriodicSync(self.sync, interval=interval if interval is not None else self.config.sync_interval)
        worker.start()
        return worker

    def close(self) -> None:
        self.sync.close()


def create_app_context(
    storage: Optional[KeyValueStorage] = None,
    *,
    config: Optional[Settings] = None,
    http: Optional[httpx.Client] = None,
    base_url: Optional[str] = None,
    plan: Optional[PlanConfig] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> AppContext:
    config = config or default_settings
    storage = storage if storage is not None else FileStorage(config.storage_dir)
    store = LocalStore(storage, clock=clock)
    manager = DataManager(store, plan=plan, clock=clock)
    sync = SyncClient(
        base_url or config.resolve_api_url(),
        store,
        Session(storage),
        http=http,
        timeout=config.http_timeout,
        on_pull=manager.refresh,
    )
    dispatcher = Dispatcher(manager, sync_client=sync)
    return AppContext(
        storage=storage, store=store, manager=manager, sync=sync, dispatcher=dispatcher, config=config
    )
