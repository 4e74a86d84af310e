from typing import Any, Dict, List, Mapping, Optional, Protocol

from pydantic import BaseModel, Field

from signup.fields import FieldKind
from signup.steps import FormDefinition


class PresentationAdapter(Protocol):
    """
    Whatever renders the form. The session pulls raw input from it and pushes
    errors and submission notices back.
    """

    def get_raw_step_input(self, step_index: int) -> Mapping[str, Any]: ...

    def show_errors(self, step_index: int, errors: Mapping[str, str]) -> None: ...

    def show_submission_failure(self, message: str) -> None: ...

    def show_submitted(self, record: Mapping[str, Any]) -> None: ...


class FieldView(BaseModel):
    name: str
    kind: FieldKind
    label: str
    placeholder: str = ""
    description: str = ""
    required: bool = True
    value: Any = None
    error: Optional[str] = None


class StepView(BaseModel):
    index: int
    title: str
    step_count: int
    is_last: bool
    fields: List[FieldView] = Field(default_factory=list)

    @property
    def action_label(self) -> str:
        return "Submit" if self.is_last else "Next"

    @property
    def can_go_back(self) -> bool:
        return self.index > 0


def describe_step(
    form: FormDefinition,
    step_index: int,
    prefill: Optional[Mapping[str, Any]] = None,
    errors: Optional[Mapping[str, str]] = None,
) -> StepView:
    step = form.step(step_index)
    prefill = prefill or {}
    errors = errors or {}

    fields: List[FieldView] = []
    for f in step.fields:
        fields.append(
            FieldView(
                name=f.name,
                kind=f.kind,
                label=f.display_name,
                placeholder=f.placeholder,
                description=f.description,
                required=f.required,
                value=prefill.get(f.name),
                error=errors.get(f.name),
            )
        )

    return StepView(
        index=step.index,
        title=step.title,
        step_count=form.step_count,
        is_last=form.is_last(step.index),
        fields=fields,
    )


def step_labels(form: FormDefinition) -> Dict[int, str]:
    return {s.index: s.title for s in form.steps}
