from labinsight.jobs.models import JobStatus
from labinsight.logging.logger import Log

ALLOWED_TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.PENDING: frozenset({JobStatus.PROCESSING, JobStatus.FAILED}),
    JobStatus.PROCESSING: frozenset({JobStatus.COMPLETED, JobStatus.FAILED}),
    JobStatus.COMPLETED: frozenset(),
    JobStatus.FAILED: frozenset(),
}


def is_allowed_transition(current: JobStatus, target: JobStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def check_transition(job_id: str, current: JobStatus, target: JobStatus) -> bool:
    """Return whether ``current -> target`` is allowed, logging blocked attempts."""
    if is_allowed_transition(current, target):
        return True
    Log.warning(
        f"Job {job_id} transition blocked",
        current=current.value,
        target=target.value,
    )
    return False
