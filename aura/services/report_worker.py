"""Background loop that sends the report on a fixed interval."""
from __future__ import annotations

import logging
import threading

from jinja2 import TemplateError

from aura.repositories.base import StoreError

from .report_service import ReportService

logger = logging.getLogger(__name__)


class ReportWorker:
    """Runs ReportService.send every ``interval_seconds`` on a daemon thread.

    Failures are logged and dropped; the next run happens on schedule.
    """

    def __init__(self, service: ReportService, interval_seconds: int) -> None:
        self.service = service
        self.interval_seconds = interval_seconds
        self._stop = threading.Event()
        self._run_lock = threading.Lock()
        self._thread: threading.Thread | None = None

    def trigger(self) -> bool:
        """Run one report now; returns whether it was sent."""
        with self._run_lock:
            try:
                return self.service.send()
            except (StoreError, TemplateError) as exc:
                logger.error("Report skipped: %s", exc)
                return False

    def _loop(self) -> None:
        while not self._stop.wait(self.interval_seconds):
            try:
                self.trigger()
            except Exception:
                logger.exception("Scheduled report failed")

    def start(self) -> threading.Thread:
        if self._thread and self._thread.is_alive():
            return self._thread
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="report-worker", daemon=True)
        self._thread.start()
        logger.info("Report worker started (every %ss)", self.interval_seconds)
        return self._thread

    def wait(self) -> None:
        self._stop.wait()

    def stop(self, timeout: float | None = 5.0) -> None:
        self._stop.set()
        if self._thread:
            self._thread.join(timeout)
            self._thread = None


def main() -> None:
    from aura.core.config import get_settings
    from aura.core.logs import configure_logging
    from aura.repositories import build_store

    settings = get_settings()
    configure_logging(settings.log_level)
    store = build_store(settings)
    worker = ReportWorker(ReportService(store, settings), settings.report_interval_seconds)
    worker.trigger()
    worker.start()
    try:
        worker.wait()
    except KeyboardInterrupt:
        logger.info("Report worker interrupted")
    finally:
        worker.stop()
        store.close()


if __name__ == "__main__":
    main()
