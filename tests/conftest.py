import multiprocessing
import signal

import pytest

from solvanity.core import generate_keypair

NON_MATCHING_ID = "1111111111111111111111111111111111111111111"


def never_matching_source():
    return NON_MATCHING_ID, "unused"


def faulting_source():
    raise RuntimeError("keypair primitive unavailable")


def always_matching_source():
    # Real keypair whose address becomes the pattern in tests that use it
    return FIXED_KEYPAIR


FIXED_KEYPAIR = generate_keypair()


@pytest.fixture
def fork_context():
    if "fork" not in multiprocessing.get_all_start_methods():
        pytest.skip("fork start method not available")
    return multiprocessing.get_context("fork")


@pytest.fixture
def restore_signals():
    saved = {sig: signal.getsignal(sig) for sig in (signal.SIGINT, signal.SIGTERM)}
    yield
    for sig, handler in saved.items():
        signal.signal(sig, handler)
