import threading
import time

import pytest
import requests


class FakeClock:
    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingTransport:
    """Stand-in transport returning a canned response after a short delay."""

    def __init__(self, status_code: int = 204, delay: float = 0.05) -> None:
        self.status_code = status_code
        self.delay = delay
        self.calls = 0
        self._lock = threading.Lock()

    def send(self, request):
        with self._lock:
            self.calls += 1
        time.sleep(self.delay)
        response = requests.Response()
        response.status_code = self.status_code
        return response


@pytest.fixture
def clock():
    return FakeClock()


def prepared(url: str = "https://us-3.rightscale.com/api/clouds", **kwargs):
    return requests.Request("GET", url, **kwargs).prepare()
