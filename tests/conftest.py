"""Shared fixtures: deterministic clocks, fake HTTP sessions, results files."""
import itertools
import json

import pytest
import requests


class FakeResponse:
    def __init__(self, status_code=200, content=b"", reason="OK"):
        self.status_code = status_code
        self.content = content
        self.reason = reason


class FakeSession(requests.Session):
    """Session that records posts and replays canned responses or errors."""

    def __init__(self, *outcomes):
        super().__init__()
        self.outcomes = list(outcomes) or [FakeResponse()]
        self.calls = []
        self.closed = False

    def post(self, url, data=None, **kwargs):
        self.calls.append({"url": url, "data": data, "headers": dict(self.headers), **kwargs})
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def close(self):
        self.closed = True
        super().close()


def stepping_clock(start_ms=1_700_000_000_000, step_ms=0):
    """Clock returning start, start+step, start+2*step, ... on each call."""
    counter = itertools.count(start_ms, step_ms) if step_ms else itertools.repeat(start_ms)
    return lambda: next(counter)


@pytest.fixture
def fixed_clock():
    return stepping_clock()


@pytest.fixture
def results_file(tmp_path):
    """Write a results JSON document and return its path."""
    def _write(doc):
        path = tmp_path / "results.json"
        path.write_text(doc if isinstance(doc, str) else json.dumps(doc))
        return str(path)
    return _write
