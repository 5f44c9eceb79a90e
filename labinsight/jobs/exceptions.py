class JobError(Exception):
    """Base exception for analysis job errors."""


class InvalidInputError(JobError):
    """Raised when a submission carries neither a document nor manual text."""


class JobNotFoundError(JobError):
    """Raised when a job id is unknown."""

    def __init__(self, job_id: str) -> None:
        super().__init__(f"Job {job_id} not found")
        self.job_id = job_id


class JobAlreadyRunningError(JobError):
    """Raised when a job is dispatched while a run for it is still in flight."""
