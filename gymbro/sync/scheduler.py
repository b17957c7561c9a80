# -*- coding: utf-8 -*-
"""Periodic background push."""

from __future__ import annotations

import logging
import threading

from .client import SyncClient

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 300.0


class PeriodicSync(threading.Thread):
    """Pushes every ``interval`` seconds while the client is signed in and online.

    A failed tick is only logged; the next tick is the retry.
    """

    def __init__(self, client: SyncClient, interval: float = DEFAULT_INTERVAL) -> None:
        super().__init__(name="gymbro-periodic-sync", daemon=True)
        self.client = client
        self.interval = interval
        self._stopped = threading.Event()

    def run(self) -> None:
        while not self._stopped.wait(self.interval):
            self.tick()

    def tick(self) -> bool:
        if not self.client.can_sync:
            return False
        try:
            return self.client.push()
        except Exception:
            logger.exception("Periodic push failed")
            return False

    def stop(self, timeout: float | None = None) -> None:
        self._stopped.set()
        if self.is_alive():
            self.join(timeout)
