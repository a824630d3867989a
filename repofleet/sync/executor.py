# Repofleet Execution Engine
# Bounded worker pool running clone and pull jobs

import queue
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from repofleet import git
from repofleet.errors import ExecutionError

DEFAULT_WORKERS = 4
CANCELLED = "cancelled"

ProgressCallback = Callable[[int, int], None]


class Operation(str, Enum):
    """Git operation performed by a job."""

    CLONE = "clone"
    PULL = "pull"


@dataclass(frozen=True)
class ExecutionJob:
    """One clone or pull to run."""

    name: str
    path: Path
    operation: Operation = Operation.CLONE
    url: Optional[str] = None
    branch: Optional[str] = None
    private_key: Optional[str] = None


@dataclass(frozen=True)
class ExecutionOutcome:
    """Result of one job."""

    name: str
    success: bool
    error: Optional[str] = None


class GitJobRunner:
    """Runs a job through the git subprocess layer."""

    def __call__(self, job: ExecutionJob) -> None:
        if job.operation == Operation.CLONE:
            if not job.url:
                raise ExecutionError(f"no URL for {job.name}")
            git.clone(job.url, job.path, branch=job.branch, private_key=job.private_key)
        elif job.operation == Operation.PULL:
            git.pull(job.path, private_key=job.private_key)
        else:
            raise ExecutionError(f"unknown operation: {job.operation}")


class ExecutionEngine:
    """
    Fixed-size thread pool over one job queue and one outcome queue.

    Every job is consumed exactly once and yields exactly one outcome.
    Outcomes come back in completion order.
    """

    def __init__(self, runner: Optional[Callable[[ExecutionJob], None]] = None, workers: int = DEFAULT_WORKERS):
        """
        Initialize engine.

        Args:
            runner: Called once per job; raising marks the job failed.
            workers: Pool size; non-positive values fall back to the default.
        """
        self.runner = runner or GitJobRunner()
        self.workers = workers if workers > 0 else DEFAULT_WORKERS

    def execute(
        self,
        jobs: Iterable[ExecutionJob],
        on_progress: Optional[ProgressCallback] = None,
        stop: Optional[threading.Event] = None,
    ) -> list[ExecutionOutcome]:
        """
        Run all jobs.

        Args:
            jobs: Jobs to run.
            on_progress: Called with (completed, total) after each outcome.
            stop: When set, queued jobs are not started; in-flight jobs finish.

        Returns:
            One outcome per job.

        Raises:
            BaseException: A non-Exception raised by the runner (e.g. SystemExit),
                re-raised after every job has an outcome.
        """
        job_list = list(jobs)
        total = len(job_list)
        if total == 0:
            return []

        stop = stop or threading.Event()
        job_queue: queue.Queue[ExecutionJob] = queue.Queue()
        outcome_queue: queue.Queue[ExecutionOutcome] = queue.Queue()
        for job in job_list:
            job_queue.put(job)

        fatal: list[BaseException] = []
        threads = [
            threading.Thread(target=self._worker, args=(job_queue, outcome_queue, stop, fatal), daemon=True)
            for _ in range(min(self.workers, total))
        ]
        for thread in threads:
            thread.start()

        outcomes: list[ExecutionOutcome] = []
        try:
            while len(outcomes) < total:
                outcomes.append(outcome_queue.get())
                if on_progress:
                    on_progress(len(outcomes), total)
        except KeyboardInterrupt:
            # Let in-flight jobs finish, start nothing new
            stop.set()
            for thread in threads:
                thread.join()
            raise

        for thread in threads:
            thread.join()

        if fatal:
            raise fatal[0]
        return outcomes

    def _worker(
        self,
        job_queue: "queue.Queue[ExecutionJob]",
        outcome_queue: "queue.Queue[ExecutionOutcome]",
        stop: threading.Event,
        fatal: list[BaseException],
    ) -> None:
        while True:
            try:
                job = job_queue.get_nowait()
            except queue.Empty:
                return

            if stop.is_set():
                outcome_queue.put(ExecutionOutcome(name=job.name, success=False, error=CANCELLED))
                continue

            try:
                self.runner(job)
            except Exception as e:  # noqa: BLE001 - any runner failure is a failed outcome
                outcome_queue.put(ExecutionOutcome(name=job.name, success=False, error=str(e)))
            except BaseException as e:
                # Drain the rest as cancelled, re-raised once every job has an outcome
                fatal.append(e)
                stop.set()
                outcome_queue.put(ExecutionOutcome(name=job.name, success=False, error=str(e) or type(e).__name__))
            else:
                outcome_queue.put(ExecutionOutcome(name=job.name, success=True))
