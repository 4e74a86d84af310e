from typing import Any, Dict, Iterable, Literal, Union

from pydantic import BaseModel, Field

from signup.errors import ErrorKind, FieldError


class Valid(BaseModel):
    outcome: Literal["valid"] = "valid"
    values: Dict[str, Any] = Field(default_factory=dict)


class Invalid(BaseModel):
    outcome: Literal["invalid"] = "invalid"
    errors: Dict[str, str] = Field(default_factory=dict)
    kinds: Dict[str, ErrorKind] = Field(default_factory=dict)

    @classmethod
    def from_error(cls, error: FieldError) -> "Invalid":
        return cls(errors={error.field: error.message}, kinds={error.field: error.kind})


ValidationResult = Union[Valid, Invalid]


def combine(results: Iterable[ValidationResult]) -> ValidationResult:
    """
    Union of per-field results. One Invalid makes the whole thing Invalid;
    values of the passing fields are dropped in that case.
    """
    values: Dict[str, Any] = {}
    errors: Dict[str, str] = {}
    kinds: Dict[str, ErrorKind] = {}

    for result in results:
        if isinstance(result, Invalid):
            errors.update(result.errors)
            kinds.update(result.kinds)
        else:
            values.update(result.values)

    if errors:
        return Invalid(errors=errors, kinds=kinds)
    return Valid(values=values)
