"""Demonstration content for when the status service cannot be reached.

Only the client-side poller uses this module; job records on the server
never receive demo data.
"""

from collections.abc import Callable

from labinsight.logging.logger import Log
from labinsight.normalization.models import CanonicalResult, Marker
from labinsight.poller.cancellation import CancellationToken
from labinsight.poller.state import STEP_COUNT, PollState, StepStatus

DEMO_SUMMARY = (
    "The lab results show some markers that deserve attention. These are "
    "demonstration results based on common patterns; consult a professional "
    "for a personalised assessment."
)

DEMO_MARKERS = (
    Marker(
        name="Glucose",
        value="105",
        unit="mg/dL",
        reference_range="70-99 mg/dL",
        interpretation="Slightly elevated. Consider monitoring carbohydrate intake.",
    ),
    Marker(
        name="Total Cholesterol",
        value="215",
        unit="mg/dL",
        reference_range="<200 mg/dL",
        interpretation="Above the desirable level. Review diet and physical activity.",
    ),
    Marker(
        name="Vitamin D (25-OH)",
        value="19",
        unit="ng/mL",
        reference_range="30-100 ng/mL",
        interpretation="Deficient. Supplementation may be needed.",
    ),
)

DEMO_RECOMMENDATIONS = (
    "Review intake of refined carbohydrates and sugars to improve glucose levels.",
    "Increase foods rich in omega-3 and soluble fibre to help control cholesterol.",
    "Consider moderate sun exposure or vitamin D supplementation under medical guidance.",
    "Keep up regular physical activity of at least 150 minutes per week.",
)


class FallbackResultProvider:
    """Produces demo results tagged ``isDemo`` behind a short simulated progress run."""

    def __init__(self, step_delay_seconds: float = 1.0) -> None:
        self._step_delay_seconds = step_delay_seconds

    def demo_result(self) -> CanonicalResult:
        return CanonicalResult(
            summary=DEMO_SUMMARY,
            markers=list(DEMO_MARKERS),
            recommendations=list(DEMO_RECOMMENDATIONS),
            is_demo=True,
        )

    def simulate(
        self,
        state: PollState,
        token: CancellationToken,
        on_update: Callable[[PollState], None] | None = None,
    ) -> tuple[PollState, CanonicalResult | None]:
        """Walk the remaining steps, pausing between them.

        Returns the final state and the demo result, or None if cancelled.
        """
        Log.warning("Status service unreachable, showing demonstration results")
        statuses = list(state.step_statuses)
        for step in range(state.step_index, STEP_COUNT):
            statuses[step] = StepStatus.PROCESSING
            state = PollState(step_index=step, step_statuses=tuple(statuses))
            if on_update is not None:
                on_update(state)
            if token.wait(self._step_delay_seconds):
                return state, None
            statuses[step] = StepStatus.COMPLETED
        state = PollState(
            step_index=STEP_COUNT - 1, step_statuses=tuple(statuses), is_polling=False
        )
        if on_update is not None:
            on_update(state)
        return state, self.demo_result()
