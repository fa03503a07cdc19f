import pytest

from solvanity.matcher import SearchPattern
from solvanity.worker import BATCH_SIZE, MSG_PROGRESS, MSG_RESULT, search_worker

from tests.conftest import NON_MATCHING_ID, faulting_source, never_matching_source

pytestmark = pytest.mark.usefixtures("restore_signals")


class StopWorker(Exception):
    pass


class FakeQueue:
    """Collects messages; raises StopWorker after `limit` puts."""

    def __init__(self, limit=None):
        self.items = []
        self.limit = limit

    def put(self, item):
        self.items.append(item)
        if self.limit and len(self.items) >= self.limit:
            raise StopWorker


class CountingSource:
    def __init__(self, hit_at=None):
        self.calls = 0
        self.hit_at = hit_at

    def __call__(self):
        self.calls += 1
        if self.calls == self.hit_at:
            return "ABhit", "secret"
        return NON_MATCHING_ID, "unused"


def test_default_batch_size():
    assert BATCH_SIZE == 10_000


def test_hit_short_circuits_batch():
    messages = FakeQueue()
    source = CountingSource(hit_at=5)
    search_worker(SearchPattern(prefix="AB"), messages, batch_size=10, source=source)
    assert messages.items == [(MSG_RESULT, ("ABhit", "secret"))]
    assert source.calls == 5


def test_progress_after_each_batch():
    messages = FakeQueue(limit=3)
    source = CountingSource()
    with pytest.raises(StopWorker):
        search_worker(SearchPattern(prefix="AB"), messages, batch_size=100, source=source)
    assert messages.items == [(MSG_PROGRESS, 100)] * 3
    assert source.calls == 300


def test_hit_after_progress():
    messages = FakeQueue()
    source = CountingSource(hit_at=150)
    search_worker(SearchPattern(prefix="AB"), messages, batch_size=100, source=source)
    assert messages.items == [
        (MSG_PROGRESS, 100),
        (MSG_RESULT, ("ABhit", "secret")),
    ]


def test_empty_pattern_never_reports_result():
    messages = FakeQueue(limit=2)
    with pytest.raises(StopWorker):
        search_worker(SearchPattern(), messages, batch_size=50, source=never_matching_source)
    assert all(kind == MSG_PROGRESS for kind, _ in messages.items)


def test_source_fault_propagates():
    with pytest.raises(RuntimeError, match="unavailable"):
        search_worker(SearchPattern(prefix="AB"), FakeQueue(), source=faulting_source)
