import sys
from pathlib import Path
from typing import Any

import pytest

# Ensure the 'catalog_sniper' package (repo root/src) is importable
SRC = Path(__file__).resolve().parents[1] / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

_NOT_JSON = object()


class DummyResp:
    def __init__(self, payload: Any = None, status_code: int = 200, text: str = ""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is _NOT_JSON:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._payload


class FakeSession:
    """Stand-in for requests.Session that replays canned responses per URL.

    Values in ``routes`` are either a single response/exception or a list that
    is consumed one entry per request (the last entry repeats).
    """

    def __init__(self, routes: dict[str, Any]):
        self.routes = {k: (list(v) if isinstance(v, list) else [v]) for k, v in routes.items()}
        self.calls: list[str] = []
        self.closed = False

    def get(self, url, headers=None, timeout=None):  # noqa: ARG002
        self.calls.append(url)
        try:
            queue = self.routes[url]
        except KeyError:
            raise AssertionError(f"Unexpected URL requested: {url}")
        outcome = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def close(self):
        self.closed = True


def page(data, cursor=None) -> DummyResp:
    payload = {"data": data}
    if cursor is not None:
        payload["nextPageCursor"] = cursor
    return DummyResp(payload)


def not_json(text: str = "<html>oops</html>") -> DummyResp:
    return DummyResp(_NOT_JSON, text=text)


@pytest.fixture
def sleeps(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    """Record every pause instead of actually sleeping."""
    calls: list[float] = []
    monkeypatch.setattr("catalog_sniper.poll.fetcher.sleep", calls.append)
    monkeypatch.setattr("catalog_sniper.poll.paginator.sleep", calls.append)
    return calls
