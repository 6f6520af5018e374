import logging
from typing import Any, Callable, Set

from PySide6.QtCore import QObject, QRunnable, QThreadPool, QTimer, Signal, Slot

logger = logging.getLogger(__name__)


class WorkerSignals(QObject):
    """Signals used by Worker to hand its outcome back to the main thread."""

    result = Signal(object)
    error = Signal(object)


class Worker(QRunnable):
    """
    Worker for running a blocking function on the thread pool.
    """
    def __init__(self, fn: Callable[[], Any]):
        super().__init__()
        self.fn = fn
        self.signals = WorkerSignals()

    @Slot()
    def run(self):
        try:
            result = self.fn()
        except Exception as e:
            logger.debug("Worker function raised %s", type(e).__name__, exc_info=True)
            self.signals.error.emit(e)
        else:
            self.signals.result.emit(result)


class QtTimerHandle:
    """Cancellable handle for a single-shot timer armed by QtTaskRunner."""

    def __init__(self, timer: QTimer):
        self._timer = timer

    def cancel(self) -> None:
        self._timer.stop()


class QtTaskRunner:
    """
    Runs blocking calls off the UI thread and delivers their outcome back on it.

    Worker signals are created on the calling (main) thread, so results emitted
    from the pool thread are queued onto the main thread before the callbacks
    run. Timers are plain single-shot QTimers on the main thread.
    """

    def __init__(self, thread_pool: QThreadPool = None):
        self._pool = thread_pool or QThreadPool.globalInstance()
        self._workers: Set[Worker] = set()

    def submit(
        self,
        fn: Callable[[], Any],
        on_result: Callable[[Any], None],
        on_error: Callable[[Exception], None],
    ) -> None:
        worker = Worker(fn)
        worker.setAutoDelete(False)
        self._workers.add(worker)

        def _finish_with_result(result: Any) -> None:
            self._workers.discard(worker)
            on_result(result)

        def _finish_with_error(error: Exception) -> None:
            self._workers.discard(worker)
            on_error(error)

        worker.signals.result.connect(_finish_with_result)
        worker.signals.error.connect(_finish_with_error)
        self._pool.start(worker)

    def call_later(self, seconds: float, callback: Callable[[], None]) -> QtTimerHandle:
        timer = QTimer()
        timer.setSingleShot(True)
        timer.timeout.connect(callback)
        timer.start(max(0, int(seconds * 1000)))
        return QtTimerHandle(timer)
