import logging
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from signup.adapter import PresentationAdapter, StepView, describe_step
from signup.errors import SubmissionError, SubmissionInFlightError, TransitionError
from signup.graph import FormGraphFactory, run_advance
from signup.results import Invalid, ValidationResult
from signup.state import FormState, FormStatus, SubmissionStatus
from signup.steps import FormDefinition
from signup.submission import SubmissionHandler, SubmissionOutcome

logger = logging.getLogger(__name__)


class FormSession:
    """
    One user's pass through a multi-step form.

    Transitions are serialized: ``advance`` runs the validate/merge graph
    synchronously and only yields to the event loop while the submission
    handler is awaited, so a second submit attempt always finds the
    submission pending and is rejected.
    """

    def __init__(
        self,
        form: FormDefinition,
        handler: SubmissionHandler,
        adapter: Optional[PresentationAdapter] = None,
        reset_on_success: bool = False,
    ):
        self.form = form
        self.handler = handler
        self.adapter = adapter
        self.reset_on_success = reset_on_success
        self.last_outcome: Optional[SubmissionOutcome] = None

        self._graph = FormGraphFactory(form).compile()
        self._state = FormState()

    # read-only views for rendering

    @property
    def state(self) -> FormState:
        return self._state.model_copy(deep=True)

    @property
    def current_step(self) -> int:
        return self._state.current_step

    @property
    def status(self) -> FormStatus:
        return self._state.status

    @property
    def is_submitted(self) -> bool:
        return self._state.status is FormStatus.SUBMITTED

    @property
    def submission_status(self) -> SubmissionStatus:
        return self._state.submission_status

    @property
    def submission_error(self) -> Optional[str]:
        return self._state.submission_error

    @property
    def field_errors(self) -> Dict[str, str]:
        return dict(self._state.field_errors)

    @property
    def accumulated(self) -> Mapping[str, Any]:
        return MappingProxyType(self._state.accumulated)

    @property
    def draft(self) -> Dict[str, Any]:
        return dict(self._state.draft)

    def prefill(self, step_index: Optional[int] = None) -> Dict[str, Any]:
        """Accumulated values for the fields of a step, shown again after going back."""
        index = self.current_step if step_index is None else step_index
        names = self.form.step(index).field_names
        return {n: self._state.accumulated[n] for n in names if n in self._state.accumulated}

    def current_view(self) -> StepView:
        return describe_step(
            self.form,
            self.current_step,
            prefill=self.prefill(),
            errors=self._state.field_errors,
        )

    def record(self) -> Dict[str, Any]:
        """The flat mapping handed to the submission handler."""
        record: Dict[str, Any] = {}
        for f in self.form.record_fields:
            value = self._state.accumulated.get(f.name)
            if value is not None:
                record[f.name] = value
        return record

    # transitions

    def _ensure_editable(self) -> None:
        if self._state.submission_status is SubmissionStatus.PENDING:
            raise SubmissionInFlightError("A submission is already in progress.")
        if self.is_submitted:
            raise TransitionError("The form has been submitted; start a new session to submit again.")

    async def advance(self, raw_values: Optional[Mapping[str, Any]] = None) -> ValidationResult:
        self._ensure_editable()

        step = self.current_step
        if raw_values is None:
            if self.adapter is None:
                raise TransitionError("No input given and no presentation adapter attached.")
            raw_values = self.adapter.get_raw_step_input(step)

        attempt = self._state.model_copy(
            update={"draft": dict(raw_values), "field_errors": {}, "last_result": None}
        )
        self._state = run_advance(self._graph, attempt)
        result = self._state.last_result

        if isinstance(result, Invalid):
            logger.warning("Step %d rejected, failing fields: %s", step, sorted(result.errors))
            if self.adapter is not None:
                self.adapter.show_errors(step, result.errors)
            return result

        if self.is_submitted:
            await self._submit()
        return result

    def retreat(self) -> int:
        """
        Go back one step without validating. The unvalidated draft is dropped;
        values accumulated for the previous step are kept for prefill.
        """
        self._ensure_editable()

        if self.current_step == 0:
            return 0

        self._state = self._state.model_copy(
            update={
                "current_step": self.current_step - 1,
                "draft": {},
                "field_errors": {},
                "last_result": None,
            }
        )
        logger.info("Moved back to step %d", self.current_step)
        return self.current_step

    async def retry_submission(self) -> SubmissionStatus:
        if self._state.submission_status is SubmissionStatus.PENDING:
            raise SubmissionInFlightError("A submission is already in progress.")
        if self._state.submission_status is not SubmissionStatus.FAILED:
            raise TransitionError("Only a failed submission can be retried.")

        self._state = self._state.model_copy(
            update={"submission_status": SubmissionStatus.PENDING, "submission_error": None}
        )
        return await self._submit()

    def reset(self) -> None:
        """Abandon the session: clear all data and return to the first step."""
        if self._state.submission_status is SubmissionStatus.PENDING:
            raise SubmissionInFlightError("Cannot reset while a submission is in progress.")
        self._state = FormState()

    async def _submit(self) -> SubmissionStatus:
        record = self.record()
        logger.info("Submitting record with fields %s", sorted(record))

        try:
            outcome = await self.handler.submit(record)
        except SubmissionError as exc:
            self._fail(exc.message)
            if self.adapter is not None:
                self.adapter.show_submission_failure(exc.message)
            return SubmissionStatus.FAILED
        except BaseException:
            # includes cancellation; the session must not stay pending
            self._fail("Submission was interrupted.")
            raise

        self.last_outcome = outcome
        self._state = self._state.model_copy(
            update={"submission_status": SubmissionStatus.SUCCEEDED}
        )
        logger.info("Submission succeeded")
        if self.adapter is not None:
            self.adapter.show_submitted(record)
        if self.reset_on_success:
            self.reset()
        return SubmissionStatus.SUCCEEDED

    def _fail(self, message: str) -> None:
        logger.warning("Submission failed: %s", message)
        self._state = self._state.model_copy(
            update={"submission_status": SubmissionStatus.FAILED, "submission_error": message}
        )
