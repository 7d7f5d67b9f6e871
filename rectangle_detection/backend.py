"""
Vision backend availability gate.

Hosts initialize the backend once at startup. Until the backend is ready,
callers get NotReady instead of a crash deep inside OpenCV. Callbacks that
arrive while initialization is running are queued and all notified with the
outcome.
"""

import logging
import threading
from enum import Enum
from typing import Callable, List, Optional

import cv2
import numpy as np

from .errors import NotReady

logger = logging.getLogger(__name__)


class BackendState(Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    FAILED = "failed"


def load_opencv() -> str:
    """
    Check that the OpenCV functions the pipeline needs are usable.

    Returns:
        OpenCV version string
    """
    probe = np.zeros((8, 8), dtype=np.uint8)
    probe[2:6, 2:6] = 255
    edges = cv2.Canny(cv2.GaussianBlur(probe, (3, 3), 0), 50, 150)
    cv2.findContours(edges, cv2.RETR_TREE, cv2.CHAIN_APPROX_SIMPLE)
    return cv2.__version__


class Backend:
    """
    State machine UNINITIALIZED -> INITIALIZING -> READY | FAILED.

    Args:
        loader: Callable doing the actual initialization, returns a version
            string; any exception it raises marks the backend as FAILED
    """

    def __init__(self, loader: Callable[[], str] = load_opencv):
        self._loader = loader
        self._lock = threading.Lock()
        self._done = threading.Event()
        self._pending: List[Callable[[bool], None]] = []
        self._state = BackendState.UNINITIALIZED
        self.version: Optional[str] = None
        self.error: Optional[BaseException] = None

    @property
    def state(self) -> BackendState:
        with self._lock:
            return self._state

    def is_ready(self) -> bool:
        return self.state == BackendState.READY

    def require_ready(self):
        state = self.state
        if state != BackendState.READY:
            raise NotReady(f"Vision backend is not ready (state: {state.value})")

    def initialize(self, callback: Optional[Callable[[bool], None]] = None, background: bool = False):
        """
        Start initialization, or join the one already running.

        Args:
            callback: Called with True/False once the outcome is known
            background: Run the loader on a daemon thread instead of inline
        """
        with self._lock:
            if self._state == BackendState.READY:
                notify_now = True
            else:
                notify_now = False
                if callback is not None:
                    self._pending.append(callback)
                if self._state == BackendState.INITIALIZING:
                    logger.debug("Backend initialization in progress, waiting...")
                    return
                self._state = BackendState.INITIALIZING
                self._done.clear()

        if notify_now:
            logger.debug("Backend already initialized")
            if callback is not None:
                callback(True)
            return

        logger.info("Starting backend initialization")
        if background:
            thread = threading.Thread(target=self._run_loader, daemon=True)
            thread.start()
        else:
            self._run_loader()

    def _run_loader(self):
        try:
            version = self._loader()
            error = None
        except Exception as e:
            version = None
            error = e

        with self._lock:
            if error is None:
                self._state = BackendState.READY
                self.version = version
                self.error = None
            else:
                self._state = BackendState.FAILED
                self.error = error
            pending = self._pending
            self._pending = []

        success = error is None
        if success:
            logger.info("Backend ready (version %s)", version)
        else:
            logger.error("Backend initialization failed: %s", error)

        for callback in pending:
            try:
                callback(success)
            except Exception:
                logger.exception("Backend initialization callback failed")
        self._done.set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the running initialization finishes. Returns is_ready()."""
        if self.state != BackendState.UNINITIALIZED:
            self._done.wait(timeout)
        return self.is_ready()

    def reset(self):
        """Back to UNINITIALIZED, dropping queued callbacks. Meant for tests."""
        logger.warning("Resetting backend state")
        with self._lock:
            self._state = BackendState.UNINITIALIZED
            self._pending = []
            self.version = None
            self.error = None
            self._done.clear()
