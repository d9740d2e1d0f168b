import os
import sys
from concurrent.futures import Future
from threading import Lock

import pytest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from pixel_collector.sinks import eventhub


class FakeSink:
    """Records published payloads and returns already-finished futures."""

    def __init__(self, error=None):
        self.error = error
        self.published = []
        self._lock = Lock()

    def publish(self, payload, properties=None):
        with self._lock:
            self.published.append((payload, dict(properties or {})))
        future = Future()
        if self.error is not None:
            future.set_exception(self.error)
        else:
            future.set_result(None)
        return future


@pytest.fixture
def fake_sink():
    return FakeSink()


@pytest.fixture(autouse=True)
def reset_sink():
    eventhub._sink = None
    yield
    eventhub._sink = None
