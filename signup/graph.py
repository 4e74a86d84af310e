import logging
from typing import Any, Dict, Literal, Optional

from langgraph.graph import END, START, StateGraph

from signup.results import Invalid, Valid
from signup.state import FormState, FormStatus, SubmissionStatus
from signup.steps import FormDefinition, validate_step

logger = logging.getLogger(__name__)


class FormGraphFactory:
    """
    Builds the graph behind ``advance``:

        START -> validate -(rejected)-> END
        validate -(accepted)-> merge -> advance | complete -> END
    """

    def __init__(self, form: FormDefinition):
        self.form = form

    def validate_node(self, state: FormState) -> Dict[str, Any]:
        step = self.form.step(state.current_step)
        result = validate_step(step, state.draft)
        errors = result.errors if isinstance(result, Invalid) else {}
        return {"last_result": result, "field_errors": errors}

    @staticmethod
    def route_validation(state: FormState) -> Literal["rejected", "accepted"]:
        return "accepted" if isinstance(state.last_result, Valid) else "rejected"

    @staticmethod
    def merge_node(state: FormState) -> Dict[str, Any]:
        """
        Fresh values of the validated step replace whatever was accumulated
        for its fields earlier; other steps' values are left alone.
        """
        accumulated = {**state.accumulated, **state.last_result.values}
        return {"accumulated": accumulated, "draft": {}}

    def route_progress(self, state: FormState) -> Literal["advance", "complete"]:
        return "complete" if self.form.is_last(state.current_step) else "advance"

    @staticmethod
    def advance_node(state: FormState) -> Dict[str, Any]:
        logger.info("Step %d validated, moving to step %d", state.current_step, state.current_step + 1)
        return {"current_step": state.current_step + 1}

    @staticmethod
    def complete_node(state: FormState) -> Dict[str, Any]:
        logger.info("Final step %d validated, form submitted", state.current_step)
        return {
            "status": FormStatus.SUBMITTED,
            "submission_status": SubmissionStatus.PENDING,
            "submission_error": None,
        }

    def build(self) -> StateGraph:
        g = StateGraph(FormState)

        g.add_node("validate", self.validate_node)
        g.add_node("merge", self.merge_node)
        g.add_node("advance", self.advance_node)
        g.add_node("complete", self.complete_node)

        g.add_edge(START, "validate")
        g.add_conditional_edges(
            "validate",
            self.route_validation,
            {"rejected": END, "accepted": "merge"},
        )
        g.add_conditional_edges(
            "merge",
            self.route_progress,
            {"advance": "advance", "complete": "complete"},
        )
        g.add_edge("advance", END)
        g.add_edge("complete", END)

        return g

    def compile(self, checkpointer: Optional[Any] = None):
        return self.build().compile(checkpointer=checkpointer)


def run_advance(graph, state: FormState) -> FormState:
    """Invoke a compiled advance graph and hand back the resulting FormState."""
    out = graph.invoke(state.model_dump())
    if isinstance(out, FormState):
        return out
    return FormState.model_validate({**state.model_dump(), **out})
