"""
Multiprocessing worker for vanity keypair search.

IMPORTANT: This module must contain only top-level importable functions.
On macOS/Windows, multiprocessing uses 'spawn' which requires worker
targets to be importable by name from a module.
"""

import signal

from solvanity.core import generate_keypair
from solvanity.matcher import SearchPattern, matches

BATCH_SIZE = 10_000

MSG_PROGRESS = "progress"
MSG_RESULT = "result"


def search_worker(
    pattern: SearchPattern,
    messages,
    batch_size: int = BATCH_SIZE,
    source=generate_keypair,
):
    """Worker process: generate keypairs in batches and check for matches.

    Runs until a match is found or the coordinator terminates the process.
    Talks to the coordinator only through one-way messages on `messages`.

    Args:
        pattern: SearchPattern shared read-only by every worker.
        messages: multiprocessing.Queue; receives ("progress", attempts)
            after each batch and ("result", (public_id, private_material)) on a hit.
        batch_size: Trials between progress reports.
        source: Zero-argument callable returning (public_id, private_material).
    """
    # Ctrl+C reaches the whole process group; shutdown is the coordinator's job.
    # SIGTERM must stay fatal so terminate() works even after a fork.
    signal.signal(signal.SIGINT, signal.SIG_IGN)
    signal.signal(signal.SIGTERM, signal.SIG_DFL)

    while True:
        attempts = 0
        for _ in range(batch_size):
            public_id, private_material = source()
            attempts += 1
            if matches(public_id, pattern):
                messages.put((MSG_RESULT, (public_id, private_material)))
                return

        messages.put((MSG_PROGRESS, attempts))
