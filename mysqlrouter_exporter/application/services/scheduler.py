"""
Sampling Scheduler

Runs the sampler on a fixed interval on a single background thread. Cycles
are strictly sequential: the next one starts only after the previous one
has returned and the interval has elapsed.
"""

import logging
import threading
from collections.abc import Callable

from ..interfaces.router_client import FetchError
from .context import cycle_context
from .sampler import CycleReport, FailurePolicy, Sampler

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 60.0


class Scheduler:
    """
    Drives a Sampler forever on a daemon thread.

    Under FailurePolicy.ABORT any error from a cycle stops the loop and is
    handed to on_fatal, which is expected to bring the process down. Under
    FailurePolicy.SKIP a FetchError that escapes the sampler (router status
    or a list fetch) is logged and the next cycle runs as scheduled. Errors
    other than FetchError are always fatal.
    """

    def __init__(
        self,
        sampler: Sampler,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        failure_policy: FailurePolicy = FailurePolicy.ABORT,
        on_fatal: Callable[[BaseException], None] | None = None,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        self.sampler = sampler
        self.interval_seconds = interval_seconds
        self.failure_policy = failure_policy
        self.on_fatal = on_fatal

        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()
        self._lock = threading.Lock()

        self.cycles_completed = 0
        self.cycles_failed = 0
        self.last_report: CycleReport | None = None
        self.fatal_error: BaseException | None = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the background sampling thread."""
        with self._lock:
            if self.is_running:
                logger.warning("Scheduler already running")
                return

            self._stop_event.clear()
            self._thread = threading.Thread(
                target=self.run_forever, name="RouterSampler", daemon=True
            )
            self._thread.start()

        logger.info(f"Scheduler started, sampling every {self.interval_seconds:g}s")

    def stop(self, timeout: float | None = 5.0) -> None:
        """Ask the loop to stop and wait for the in-flight cycle to finish."""
        self._stop_event.set()
        with self._lock:
            thread = self._thread
        if thread and thread.is_alive() and thread is not threading.current_thread():
            thread.join(timeout=timeout)
            if thread.is_alive():
                logger.warning("Sampling thread did not stop within timeout")

    def run_forever(self) -> None:
        """Run cycles until stopped or a fatal error occurs."""
        while not self._stop_event.is_set():
            self.run_once()
            self._stop_event.wait(self.interval_seconds)

    def run_once(self) -> bool:
        """
        Run a single cycle.

        Returns:
            True if the cycle completed
        """
        with cycle_context(self.cycles_completed + self.cycles_failed + 1):
            return self._run_cycle()

    def _run_cycle(self) -> bool:
        try:
            report = self.sampler.sample()
        except FetchError as e:
            self.cycles_failed += 1
            if self.failure_policy is FailurePolicy.SKIP:
                logger.error(f"Sampling cycle aborted, retrying next interval: {e}")
                return False
            self._fail(e)
            return False
        except Exception as e:
            self.cycles_failed += 1
            self._fail(e)
            return False

        self.cycles_completed += 1
        self.last_report = report
        logger.info(
            f"Sampled router {report.router_hostname}: {report.metadata_count} metadata, "
            f"{report.route_count} routes, {report.connection_count} connections "
            f"in {report.duration_seconds:.3f}s",
            extra={"cycle": report.to_dict()},
        )
        return True

    def _fail(self, error: BaseException) -> None:
        logger.critical(f"Sampling cycle failed, stopping exporter: {error}", exc_info=error)
        self.fatal_error = error
        self._stop_event.set()
        if self.on_fatal is not None:
            self.on_fatal(error)
