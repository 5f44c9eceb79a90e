"""Client-side polling of analysis job status.

A ``PollingTask`` owns one job's polling loop and a ``CancellationToken``.
It maps each progress reading onto the four-step ``PollState``, stops on a
terminal status, a timeout or cancellation, and reports its outcome to the
terminal callback exactly once. ``stop()`` ends the loop without a callback.
"""

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from labinsight.config.settings import Settings
from labinsight.logging.logger import Log
from labinsight.normalization.models import CanonicalResult
from labinsight.poller.cancellation import CancellationToken
from labinsight.poller.client import AnalysisStatusClient, StatusSnapshot
from labinsight.poller.exceptions import StatusTransportError
from labinsight.poller.fallback import FallbackResultProvider
from labinsight.poller.state import PollState, apply_error, apply_progress, stopped


class PollOutcome(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"
    DEMO = "demo"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class PollResult:
    job_id: str
    outcome: PollOutcome
    state: PollState
    result: CanonicalResult | None = None
    error: str | None = None


TerminalCallback = Callable[[PollResult], None]
UpdateCallback = Callable[[PollState], None]


class PollingTask:
    def __init__(
        self,
        job_id: str,
        client: AnalysisStatusClient,
        on_terminal: TerminalCallback,
        *,
        on_update: UpdateCallback | None = None,
        fallback: FallbackResultProvider | None = None,
        interval_seconds: float = 3.0,
        confirm_delay_seconds: float = 1.0,
        max_duration_seconds: float = 600,
        max_transport_failures: int = 5,
        token: CancellationToken | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.job_id = job_id
        self._client = client
        self._on_terminal = on_terminal
        self._on_update = on_update
        self._fallback = fallback
        self._interval = interval_seconds
        self._confirm_delay = confirm_delay_seconds
        self._max_duration = max_duration_seconds
        self._max_transport_failures = max(1, max_transport_failures)
        self._token = token if token is not None else CancellationToken()
        self._clock = clock
        self._state = PollState()
        self._thread: threading.Thread | None = None
        self._start_lock = threading.Lock()
        self._finish_lock = threading.Lock()
        self._finished = False

    @property
    def state(self) -> PollState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def is_finished(self) -> bool:
        return self._finished

    def start(self) -> None:
        """Run the loop on a background thread. Starting twice is a no-op."""
        with self._start_lock:
            if self._thread is not None or self._token.is_cancelled:
                return
            self._thread = threading.Thread(
                target=self.run, name=f"poll-{self.job_id}", daemon=True
            )
            self._thread.start()

    def stop(self) -> None:
        """Cancel polling; no terminal callback is delivered afterwards."""
        self._token.cancel()
        with self._finish_lock:
            self._finished = True
        self._state = stopped(self._state)

    def join(self, timeout: float | None = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def run(self) -> PollResult | None:
        """Poll until a terminal outcome; None if cancelled first."""
        deadline = self._clock() + self._max_duration
        seen_status = False
        failures = 0
        confirming = False

        while not self._token.is_cancelled:
            if self._clock() >= deadline:
                return self._finish(
                    PollOutcome.TIMED_OUT,
                    error=f"No terminal status after {self._max_duration:g}s",
                )
            try:
                snapshot = self._client.get_status(self.job_id)
            except StatusTransportError as exc:
                if exc.is_client_error:
                    Log.warning(
                        f"Status service rejected poll for job {self.job_id}: {exc}",
                        status_code=exc.status_code,
                    )
                    self._update(apply_error(self._state))
                    return self._finish(PollOutcome.FAILED, error=exc.error or str(exc))
                failures += 1
                confirming = False
                Log.warning(f"Status poll for job {self.job_id} failed: {exc}", failures=failures)
                if not seen_status or failures >= self._max_transport_failures:
                    return self._fall_back(str(exc))
                if self._token.wait(self._interval):
                    break
                continue

            seen_status = True
            failures = 0
            self._update(apply_progress(self._state, snapshot.progress))

            if snapshot.status == "failed":
                self._update(apply_error(self._state))
                return self._finish(
                    PollOutcome.FAILED,
                    error=snapshot.error or snapshot.message or "Analysis failed",
                )
            if self._is_complete(snapshot):
                if confirming:
                    return self._finish(PollOutcome.COMPLETED, result=snapshot.data)
                # A 100% reading is re-checked once before it is trusted.
                confirming = True
                delay = self._confirm_delay
            else:
                confirming = False
                delay = self._interval
            if self._token.wait(delay):
                break
        return None

    @staticmethod
    def _is_complete(snapshot: StatusSnapshot) -> bool:
        return snapshot.progress >= 100 and snapshot.status == "completed"

    def _update(self, state: PollState) -> None:
        self._state = state
        if self._on_update is not None:
            self._on_update(state)

    def _fall_back(self, error: str) -> PollResult | None:
        if self._fallback is None:
            self._update(apply_error(self._state))
            return self._finish(PollOutcome.FAILED, error=f"Status service unreachable: {error}")
        state, demo = self._fallback.simulate(self._state, self._token, self._on_update)
        self._state = state
        if demo is None:
            return None
        return self._finish(PollOutcome.DEMO, result=demo)

    def _finish(
        self,
        outcome: PollOutcome,
        result: CanonicalResult | None = None,
        error: str | None = None,
    ) -> PollResult | None:
        with self._finish_lock:
            if self._finished:
                return None
            self._finished = True
        self._state = stopped(self._state)
        poll_result = PollResult(
            job_id=self.job_id,
            outcome=outcome,
            state=self._state,
            result=result,
            error=error,
        )
        if outcome is PollOutcome.COMPLETED:
            Log.info(f"Job {self.job_id} polling finished", outcome=outcome.value)
        else:
            Log.warning(f"Job {self.job_id} polling finished", outcome=outcome.value, error=error)
        self._on_terminal(poll_result)
        return poll_result


class PollingManager:
    """Keeps at most one active ``PollingTask`` per job."""

    def __init__(
        self,
        client: AnalysisStatusClient,
        fallback: FallbackResultProvider | None = None,
        *,
        interval_seconds: float = 3.0,
        confirm_delay_seconds: float = 1.0,
        max_duration_seconds: float = 600,
        max_transport_failures: int = 5,
    ) -> None:
        self._client = client
        self._fallback = fallback
        self._task_options = {
            "interval_seconds": interval_seconds,
            "confirm_delay_seconds": confirm_delay_seconds,
            "max_duration_seconds": max_duration_seconds,
            "max_transport_failures": max_transport_failures,
        }
        self._tasks: dict[str, PollingTask] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_settings(
        cls, settings: Settings, client: AnalysisStatusClient | None = None
    ) -> "PollingManager":
        return cls(
            client if client is not None else AnalysisStatusClient(settings.status_base_url),
            FallbackResultProvider(settings.demo_step_delay_seconds),
            interval_seconds=settings.poll_interval_seconds,
            confirm_delay_seconds=settings.poll_confirm_delay_seconds,
            max_duration_seconds=settings.poll_max_duration_seconds,
            max_transport_failures=settings.poll_max_transport_failures,
        )

    def watch(
        self,
        job_id: str,
        on_terminal: TerminalCallback,
        on_update: UpdateCallback | None = None,
    ) -> PollingTask:
        """Start polling a job, or return the task already polling it."""
        with self._lock:
            existing = self._tasks.get(job_id)
            if existing is not None and existing.is_running and not existing.is_finished:
                return existing

            def finished(result: PollResult) -> None:
                with self._lock:
                    if self._tasks.get(job_id) is task:
                        del self._tasks[job_id]
                on_terminal(result)

            task = PollingTask(
                job_id,
                self._client,
                finished,
                on_update=on_update,
                fallback=self._fallback,
                **self._task_options,
            )
            self._tasks[job_id] = task
            # Every registered task is already started.
            task.start()
        return task

    def stop(self, job_id: str) -> None:
        with self._lock:
            task = self._tasks.pop(job_id, None)
        if task is not None:
            task.stop()

    def stop_all(self) -> None:
        with self._lock:
            tasks = list(self._tasks.values())
            self._tasks.clear()
        for task in tasks:
            task.stop()
