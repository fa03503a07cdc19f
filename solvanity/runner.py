"""
Long-running generator service.

Runs one search after another from environment settings, verifies each
keypair and hands it to a sink. A failed search is logged and the loop
moves on. SIGINT/SIGTERM stop the in-flight search, close the sink and
exit cleanly.

Usage:
    VANITY_SUFFIX=pump VANITY_CORES=8 python -m solvanity
"""

import logging
import signal
import sys
from datetime import datetime
from typing import Callable, Optional

from solvanity import __version__
from solvanity.config import Settings
from solvanity.errors import ConfigurationError, SearchFailed, VanityError
from solvanity.export import JsonFileSink, KeypairSink
from solvanity.generator import KeypairResult, SearchStats, generate_vanity_keypair
from solvanity.matcher import SearchPattern, estimate_difficulty
from solvanity.verify import verify_keypair

logger = logging.getLogger(__name__)

LOG_FORMAT = "[%(levelname)s %(asctime)s] %(message)s"


class ShutdownRequested(SystemExit):
    """Raised from a signal handler to unwind the running search."""

    def __init__(self, signal_name: str):
        super().__init__(0)
        self.signal_name = signal_name


def format_time(seconds: float) -> str:
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    elif seconds < 60:
        return f"{seconds:.1f}s"
    elif seconds < 3600:
        return f"{seconds / 60:.1f}m"
    elif seconds < 86400:
        return f"{seconds / 3600:.1f}h"
    else:
        return f"{seconds / 86400:.1f}d"


def format_rate(rate: float) -> str:
    if rate < 1000:
        return f"{rate:.0f}"
    elif rate < 1_000_000:
        return f"{rate / 1000:.1f}K"
    else:
        return f"{rate / 1_000_000:.2f}M"


def progress_callback(stats: SearchStats, stream=None) -> None:
    stream = stream or sys.stderr
    stream.write(
        f"\r[{datetime.now().isoformat(timespec='seconds')}] "
        f"Total: {stats.total_attempts:,}  |  "
        f"Overall: {format_rate(stats.rate)}/s  |  "
        f"Elapsed: {format_time(stats.elapsed)}  "
    )
    stream.flush()


def install_signal_handlers() -> None:
    """Turn SIGINT and SIGTERM into ShutdownRequested in the main thread."""
    def handle_shutdown(signum, frame):
        raise ShutdownRequested(signal.Signals(signum).name)

    signal.signal(signal.SIGINT, handle_shutdown)
    signal.signal(signal.SIGTERM, handle_shutdown)


def search_with_settings(
    pattern: SearchPattern,
    settings: Settings,
    show_progress: bool = False,
) -> KeypairResult:
    """Run one search with the tuning from settings."""
    try:
        return generate_vanity_keypair(
            pattern.prefix,
            pattern.suffix,
            timeout_seconds=settings.timeout_seconds,
            cores=settings.cores or None,
            on_progress=progress_callback if show_progress else None,
        )
    finally:
        if show_progress:
            sys.stderr.write("\n")


def run_generator_loop(
    settings: Settings,
    sink: KeypairSink,
    search: Optional[Callable[[SearchPattern, Settings], KeypairResult]] = None,
) -> int:
    """Generate keypairs until settings.max_addresses are saved (0 = forever).

    Returns the number of keypairs saved.
    """
    if search is None:
        show_progress = sys.stderr.isatty()

        def search(pattern, settings):
            return search_with_settings(pattern, settings, show_progress)

    pattern = settings.pattern
    difficulty = estimate_difficulty(pattern)
    logger.info("Pattern: %s", pattern.describe())
    if difficulty["expected_attempts"]:
        logger.info("Expected: ~%s attempts (%s)",
                    f"{difficulty['expected_attempts']:,}",
                    difficulty["difficulty_description"])
    else:
        logger.warning("Difficulty: %s", difficulty["difficulty_description"])

    saved = 0
    attempt = 0
    while not settings.max_addresses or saved < settings.max_addresses:
        attempt += 1
        logger.info("=== Generating address #%d ===", attempt)

        try:
            result = search(pattern, settings)
        except SearchFailed as e:
            logger.error("Address #%d failed, no keypair was produced: %s", attempt, e)
            continue
        except Exception as e:
            logger.error("Error generating address #%d: %s", attempt, e)
            continue

        logger.info("Address #%d generated", attempt)
        logger.info("Public Key: %s", result.public_id)

        check = verify_keypair(result.public_id, result.private_material)
        if not check["valid"]:
            logger.error("Address #%d failed verification: %s", attempt, check["error"])
            continue

        try:
            sink.save(result, pattern)
        except Exception as e:
            logger.error("Error saving address #%d: %s", attempt, e)
            continue
        saved += 1

    return saved


def main(environ=None) -> int:
    try:
        settings = Settings.from_env(environ)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(level=settings.log_level.upper(), format=LOG_FORMAT)
    logger.info("solvanity v%s", __version__)

    install_signal_handlers()
    sink = JsonFileSink(settings.output_dir)
    try:
        saved = run_generator_loop(settings, sink)
        logger.info("Saved %d address(es)", saved)
    except ShutdownRequested as e:
        logger.info("Received %s. Shutting down gracefully...", e.signal_name)
    except VanityError as e:
        logger.error("Fatal error: %s", e)
        return 1
    finally:
        sink.close()
    return 0
