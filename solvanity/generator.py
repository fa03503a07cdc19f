"""
Generator orchestrator: manages worker processes, progress and the result race.
"""

import logging
import math
import multiprocessing
import os
import queue
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional, Union

from solvanity.core import generate_keypair
from solvanity.errors import ConfigurationError, SearchExhausted, SearchTimedOut
from solvanity.matcher import SearchPattern, make_pattern, matches
from solvanity.worker import BATCH_SIZE, MSG_PROGRESS, MSG_RESULT, search_worker

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 300
PROGRESS_INTERVAL = 1.0        # seconds between progress snapshots
REAP_INTERVAL = 0.2            # max seconds between worker liveness checks
JOIN_TIMEOUT = 2.0


@dataclass(frozen=True)
class KeypairResult:
    """A matching keypair. private_material must never be logged."""
    public_id: str
    private_material: str


@dataclass(frozen=True)
class SearchStats:
    """Observability snapshot of a running search."""
    total_attempts: int = 0
    elapsed: float = 0.0
    rate: float = 0.0
    pool_size: int = 0


@dataclass(frozen=True)
class Found:
    result: KeypairResult
    stats: SearchStats


@dataclass(frozen=True)
class TimedOut:
    timeout_seconds: float
    stats: SearchStats


@dataclass(frozen=True)
class Exhausted:
    stats: SearchStats


SearchOutcome = Union[Found, TimedOut, Exhausted]


def default_cores() -> int:
    """Available CPUs minus two, at least 1. Honors the process CPU affinity."""
    if hasattr(os, "sched_getaffinity"):
        available = len(os.sched_getaffinity(0))
    else:
        available = os.cpu_count() or 1
    return max(1, available - 2)


class ProgressTracker:
    """Running total of attempts reported by workers.

    Reports are summed, so arrival order does not matter.
    """

    def __init__(self, start_time: float):
        self.start_time = start_time
        self.total_attempts = 0

    def add(self, attempts: int) -> None:
        if attempts < 1:
            raise ValueError(f"Progress report must be >= 1 attempt, got {attempts}")
        self.total_attempts += attempts

    def snapshot(self, now: float, pool_size: int = 0) -> SearchStats:
        elapsed = now - self.start_time
        return SearchStats(
            total_attempts=self.total_attempts,
            elapsed=elapsed,
            rate=self.total_attempts / elapsed if elapsed > 0 else 0.0,
            pool_size=pool_size,
        )


class WorkerHandle:
    """Coordinator-owned reference to one worker process."""

    def __init__(self, process):
        self.process = process
        self._started = False

    @property
    def name(self) -> str:
        return self.process.name

    @property
    def exitcode(self) -> Optional[int]:
        return self.process.exitcode

    def start(self) -> None:
        self.process.start()
        self._started = True

    def is_alive(self) -> bool:
        return self._started and self.process.is_alive()

    def terminate(self, join: bool = True) -> None:
        """Forcefully stop the process. A no-op if it has already exited."""
        if not self._started:
            return
        if self.process.is_alive():
            self.process.terminate()
        if join:
            self.process.join(JOIN_TIMEOUT)
            if self.process.is_alive():
                logger.warning("Worker %s ignored SIGTERM, killing it", self.name)
                self.process.kill()
                self.process.join(JOIN_TIMEOUT)


class VanityGenerator:
    """Runs one parallel vanity keypair search and resolves one SearchOutcome.

    Usage:
        gen = VanityGenerator(SearchPattern(suffix="pump"), timeout_seconds=600)
        gen.on_progress = lambda stats: print(f"{stats.rate:.0f} keys/sec")
        outcome = gen.run()

    The first matching result, the timeout, or the pool emptying resolves
    the search, whichever happens first. Later signals are ignored.
    """

    def __init__(
        self,
        pattern: SearchPattern,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        cores: Optional[int] = None,
        batch_size: int = BATCH_SIZE,
        source: Callable[[], tuple[str, str]] = generate_keypair,
        progress_interval: float = PROGRESS_INTERVAL,
        mp_context=None,
    ):
        if not isinstance(pattern, SearchPattern):
            raise ConfigurationError(f"Expected a SearchPattern, got {type(pattern).__name__}")
        self.pattern = make_pattern(pattern.prefix, pattern.suffix)

        if isinstance(cores, bool):
            raise ConfigurationError(f"cores must be a positive integer, got {cores!r}")
        if cores is None or cores == 0:
            cores = default_cores()
        if not isinstance(cores, int) or cores < 0:
            raise ConfigurationError(f"cores must be a positive integer, got {cores!r}")
        if isinstance(timeout_seconds, bool) or not isinstance(timeout_seconds, (int, float)) \
                or not math.isfinite(timeout_seconds) or timeout_seconds <= 0:
            raise ConfigurationError(
                f"timeout_seconds must be a finite number > 0, got {timeout_seconds!r}"
            )
        if isinstance(batch_size, bool) or not isinstance(batch_size, int) or batch_size < 1:
            raise ConfigurationError(f"batch_size must be >= 1, got {batch_size!r}")
        if progress_interval <= 0:
            raise ConfigurationError(f"progress_interval must be > 0, got {progress_interval!r}")

        self.cores = cores
        self.timeout_seconds = timeout_seconds
        self.batch_size = batch_size
        self.source = source
        self.progress_interval = progress_interval
        self._ctx = mp_context or multiprocessing.get_context()

        # Callbacks
        self.on_progress: Optional[Callable[[SearchStats], None]] = None
        self.on_result: Optional[Callable[[KeypairResult], None]] = None
        self.on_complete: Optional[Callable[[SearchOutcome], None]] = None

        # Internal state, owned by the thread calling run()
        self._workers: set[WorkerHandle] = set()
        self._spawned: list[WorkerHandle] = []
        self._messages = None
        self._tracker: Optional[ProgressTracker] = None
        self._outcome: Optional[SearchOutcome] = None
        self._resolved = False
        self._is_running = False
        self._stop_requested = threading.Event()

    @property
    def pool_size(self) -> int:
        return len(self._workers)

    @property
    def workers(self) -> list[WorkerHandle]:
        """Every worker spawned by the current or last run."""
        return list(self._spawned)

    @property
    def total_attempts(self) -> int:
        return self._tracker.total_attempts if self._tracker else 0

    @property
    def outcome(self) -> Optional[SearchOutcome]:
        return self._outcome

    @property
    def is_running(self) -> bool:
        return self._is_running

    def run(self) -> SearchOutcome:
        """Run the search to completion (blocking)."""
        if self._is_running:
            raise RuntimeError("Generator is already running")

        self._workers = set()
        self._spawned = []
        self._outcome = None
        self._resolved = False
        self._stop_requested.clear()
        self._is_running = True
        self._messages = self._ctx.Queue()

        start = time.monotonic()
        self._tracker = ProgressTracker(start)
        deadline = start + self.timeout_seconds
        next_tick = start + self.progress_interval

        logger.info(
            "Starting generation with %s using %d cores",
            self.pattern.describe(), self.cores,
        )
        if self.pattern.is_empty:
            logger.warning("Empty pattern never matches; this search can only time out")

        try:
            self._spawn()
            while not self._resolved:
                now = time.monotonic()
                if now >= deadline:
                    self._on_timeout()
                    break
                if now >= next_tick:
                    self._emit_progress()
                    while next_tick <= now:
                        next_tick += self.progress_interval

                wait = max(0.0, min(deadline, next_tick, now + REAP_INTERVAL) - now)
                try:
                    message = self._messages.get(timeout=wait)
                except queue.Empty:
                    pass
                else:
                    self._handle_message(message)

                if not self._resolved:
                    self._reap()
        finally:
            self._terminate_all()
            self._messages.close()
            self._is_running = False

        if self.on_complete:
            self.on_complete(self._outcome)
        return self._outcome

    def stop(self) -> None:
        """Terminate every worker. Safe to call at any time and repeatedly.

        A running search sees its pool empty and resolves as Exhausted.
        """
        self._stop_requested.set()
        for handle in list(self._spawned):
            handle.terminate(join=False)

    def _spawn(self) -> None:
        for i in range(self.cores):
            if self._stop_requested.is_set():
                break
            process = self._ctx.Process(
                target=search_worker,
                args=(self.pattern, self._messages, self.batch_size, self.source),
                daemon=True,
                name=f"solvanity-worker-{i}",
            )
            handle = WorkerHandle(process)
            self._spawned.append(handle)
            self._workers.add(handle)
            handle.start()
            # stop() may have run between the check above and start()
            if self._stop_requested.is_set():
                handle.terminate(join=False)
                break

    def _snapshot(self) -> SearchStats:
        return self._tracker.snapshot(time.monotonic(), len(self._workers))

    def _emit_progress(self) -> None:
        stats = self._snapshot()
        logger.debug(
            "Total: %s | Overall: %.2f/s | Workers: %d",
            f"{stats.total_attempts:,}", stats.rate, stats.pool_size,
        )
        if self.on_progress:
            self.on_progress(stats)

    def _handle_message(self, message) -> None:
        kind, payload = message
        if kind == MSG_PROGRESS:
            self._tracker.add(payload)
        elif kind == MSG_RESULT:
            self._on_result(payload)
        else:
            logger.warning("Ignoring unknown worker message type %r", kind)

    def _on_result(self, payload) -> None:
        public_id, private_material = payload
        if self._resolved:
            logger.debug("Ignoring late result %s", public_id)
            return
        if not matches(public_id, self.pattern):
            logger.warning("Discarding result %s: does not match %s",
                           public_id, self.pattern.describe())
            return

        result = KeypairResult(public_id=public_id, private_material=private_material)
        logger.info("Result found. Terminating workers...")
        if self._resolve(Found(result=result, stats=self._snapshot())) and self.on_result:
            self.on_result(result)

    def _on_timeout(self) -> None:
        logger.warning("Generation timed out after %s seconds. Terminating workers...",
                       self.timeout_seconds)
        self._resolve(TimedOut(timeout_seconds=self.timeout_seconds, stats=self._snapshot()))

    def _reap(self) -> None:
        for handle in list(self._workers):
            if handle.is_alive():
                continue
            self._workers.discard(handle)
            if handle.exitcode:
                logger.error("Worker %s exited abnormally (exit code %s)",
                             handle.name, handle.exitcode)
            else:
                logger.debug("Worker %s exited", handle.name)

        if self._workers or self._resolved:
            return

        # A worker may have posted its result just before exiting
        self._drain()
        if not self._resolved:
            logger.error("All workers have exited without finding a result")
            self._resolve(Exhausted(stats=self._snapshot()))

    def _drain(self) -> None:
        while not self._resolved:
            try:
                message = self._messages.get_nowait()
            except queue.Empty:
                return
            self._handle_message(message)

    def _resolve(self, outcome: SearchOutcome) -> bool:
        """Record the outcome once; returns False if already resolved."""
        if self._resolved:
            return False
        self._resolved = True
        self._outcome = outcome
        self._terminate_all()
        return True

    def _terminate_all(self) -> None:
        for handle in list(self._workers):
            handle.terminate()
            self._workers.discard(handle)


def generate_vanity_keypair(
    prefix: str = "",
    suffix: str = "",
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    cores: Optional[int] = None,
    on_progress: Optional[Callable[[SearchStats], None]] = None,
    **kwargs,
) -> KeypairResult:
    """Search for a keypair and return it, raising if none was produced.

    Extra keyword arguments are passed to VanityGenerator.

    Raises:
        ConfigurationError: invalid pattern or tuning parameters.
        SearchTimedOut: no match before the deadline.
        SearchExhausted: every worker exited without a match.
    """
    generator = VanityGenerator(
        SearchPattern(prefix=prefix or "", suffix=suffix or ""),
        timeout_seconds=timeout_seconds,
        cores=cores,
        **kwargs,
    )
    generator.on_progress = on_progress
    outcome = generator.run()
    if isinstance(outcome, Found):
        return outcome.result
    if isinstance(outcome, TimedOut):
        raise SearchTimedOut(outcome.timeout_seconds)
    raise SearchExhausted()
