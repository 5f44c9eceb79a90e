"""Four-step progress display derived from a single 0-100 progress value."""

from dataclasses import dataclass, field, replace
from enum import Enum

STEP_COUNT = 4

# (highest progress in the band, active step); bands are checked in order.
QUARTILE_STEPS: tuple[tuple[int, int], ...] = (
    (25, 0),
    (50, 1),
    (75, 2),
    (99, 3),
)


class StepStatus(str, Enum):
    WAITING = "waiting"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass(frozen=True)
class PollState:
    step_index: int = 0
    step_statuses: tuple[StepStatus, ...] = field(
        default_factory=lambda: (StepStatus.WAITING,) * STEP_COUNT
    )
    is_polling: bool = True


def active_step(progress: int) -> int | None:
    """Step being processed at ``progress``; None once everything is complete."""
    for upper, step in QUARTILE_STEPS:
        if progress <= upper:
            return step
    return None


def apply_progress(state: PollState, progress: int) -> PollState:
    """Derive step statuses from progress. Steps after the active one are left as they were."""
    step = active_step(progress)
    if step is None:
        return replace(
            state,
            step_index=STEP_COUNT - 1,
            step_statuses=(StepStatus.COMPLETED,) * STEP_COUNT,
        )
    statuses = list(state.step_statuses)
    for index in range(step):
        statuses[index] = StepStatus.COMPLETED
    statuses[step] = StepStatus.PROCESSING
    return replace(state, step_index=step, step_statuses=tuple(statuses))


def apply_error(state: PollState) -> PollState:
    statuses = list(state.step_statuses)
    statuses[state.step_index] = StepStatus.ERROR
    return replace(state, step_statuses=tuple(statuses), is_polling=False)


def stopped(state: PollState) -> PollState:
    return replace(state, is_polling=False)
