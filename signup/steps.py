from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, model_validator

from signup.errors import CrossFieldError
from signup.fields import FieldDescriptor, validate_field
from signup.results import Invalid, ValidationResult, combine


class CrossFieldRule(BaseModel):
    """
    Relational check over a step's typed values. Only evaluated once every
    field of the step passed on its own; a failure is reported on ``field``.
    """

    model_config = ConfigDict(frozen=True)

    predicate: Callable[[Mapping[str, Any]], bool]
    message: str
    field: str


class StepDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    index: int
    title: str = ""
    fields: Tuple[FieldDescriptor, ...]
    cross_field_rule: Optional[CrossFieldRule] = None

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    @model_validator(mode="after")
    def check_rule_target(self) -> "StepDescriptor":
        rule = self.cross_field_rule
        if rule is not None and rule.field not in self.field_names:
            raise ValueError(
                f"cross-field rule of step {self.index} targets unknown field {rule.field!r}"
            )
        return self


def validate_step(step: StepDescriptor, raw_values: Mapping[str, Any]) -> ValidationResult:
    """
    Validate every field of ``step`` independently, then run the step's
    cross-field rule against the typed values. Keys of ``raw_values`` that do
    not belong to the step are ignored.
    """
    result = combine(validate_field(f, raw_values.get(f.name)) for f in step.fields)

    rule = step.cross_field_rule
    if isinstance(result, Invalid) or rule is None:
        return result

    if not rule.predicate(result.values):
        return Invalid.from_error(CrossFieldError(rule.field, rule.message))
    return result


class FormDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    steps: Tuple[StepDescriptor, ...]

    @model_validator(mode="after")
    def check_layout(self) -> "FormDefinition":
        if not self.steps:
            raise ValueError("a form needs at least one step")

        indices = [s.index for s in self.steps]
        if indices != list(range(len(self.steps))):
            raise ValueError(f"step indices must be contiguous from 0, got {indices}")

        seen: Dict[str, int] = {}
        for step in self.steps:
            for name in step.field_names:
                if name in seen:
                    raise ValueError(
                        f"field {name!r} appears in step {seen[name]} and step {step.index}"
                    )
                seen[name] = step.index
        return self

    @property
    def step_count(self) -> int:
        return len(self.steps)

    def step(self, index: int) -> StepDescriptor:
        if not 0 <= index < self.step_count:
            raise IndexError(f"step {index} out of range [0, {self.step_count - 1}]")
        return self.steps[index]

    def is_last(self, index: int) -> bool:
        return index == self.step_count - 1

    @property
    def record_fields(self) -> List[FieldDescriptor]:
        return [f for step in self.steps for f in step.fields if f.in_record]
