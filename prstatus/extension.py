"""Host lifecycle adapter: wires session/input hooks to the selector and a status sink."""

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Protocol

from prstatus.models import PullRequest
from prstatus.providers.github import GitHubBackend
from prstatus.query import StatusQueryService
from prstatus.render import STATUS_KEY, format_status
from prstatus.selector import PrSelector
from prstatus.settings import PrStatusSettings, get_settings

logger = logging.getLogger(__name__)

# Input the host synthesized on our behalf; never scanned for URLs.
EXTENSION_SOURCE = "extension"

_UNSET = object()


class StatusSink(Protocol):
    def set_status(self, key: str, value: str | None) -> None: ...


class Scheduler(ABC):
    @abstractmethod
    def start(self, interval: float, callback: Callable[[], None]) -> None: ...

    @abstractmethod
    def stop(self) -> None: ...


class ThreadScheduler(Scheduler):
    """Calls callback every interval seconds on a daemon thread.

    A tick that outruns the interval delays the next one; ticks never overlap.
    """

    def __init__(self) -> None:
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self, interval: float, callback: Callable[[], None]) -> None:
        self.stop()
        self._stop = threading.Event()
        stop = self._stop

        def run() -> None:
            while not stop.wait(interval):
                try:
                    callback()
                except Exception:
                    logger.exception("poll tick failed")

        self._thread = threading.Thread(target=run, name="pr-status-poll", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=1)
        self._thread = None


class PrStatusExtension:
    def __init__(
        self,
        sink: StatusSink,
        service: StatusQueryService,
        scheduler: Scheduler,
        settings: PrStatusSettings,
    ) -> None:
        self._sink = sink
        self._selector = PrSelector(service)
        self._scheduler = scheduler
        self._settings = settings
        self._cwd: str | None = None
        self._shown: object = _UNSET
        # Held across select-and-show so a slow tick cannot push over a newer pin.
        self._lock = threading.Lock()

    @property
    def selector(self) -> PrSelector:
        return self._selector

    def _show(self, pr: PullRequest | None) -> None:
        value = format_status(pr) if pr is not None else None
        if value == self._shown:
            return
        self._shown = value
        self._sink.set_status(STATUS_KEY, value)

    def _tick(self) -> None:
        with self._lock:
            if self._cwd is not None:
                self._show(self._selector.poll(self._cwd))

    def on_session_start(self, cwd: str) -> None:
        self._cwd = cwd
        self._tick()
        self._scheduler.start(self._settings.poll_interval, self._tick)

    def on_session_switch(self, cwd: str) -> None:
        with self._lock:
            self._cwd = cwd
            self._shown = _UNSET
            self._show(self._selector.switch(cwd))

    def on_session_shutdown(self) -> None:
        self._scheduler.stop()

    def on_input(self, text: str, source: str | None = None) -> None:
        if source == EXTENSION_SOURCE or not text:
            return
        with self._lock:
            selection = self._selector.mention(text)
            if selection is not None:
                self._show(selection.pull_request)

    def on_before_agent_start(self, prompt: str) -> None:
        self.on_input(prompt)


def create_extension(sink: StatusSink, settings: PrStatusSettings | None = None) -> PrStatusExtension:
    settings = settings or get_settings()
    service = StatusQueryService(GitHubBackend(settings))
    return PrStatusExtension(sink, service, ThreadScheduler(), settings)
