import re
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, TypeAdapter

from signup.errors import FieldConstraintError, FieldTypeError
from signup.results import Invalid, Valid, ValidationResult


class FieldKind(str, Enum):
    TEXT = "text"
    EMAIL = "email"
    DATE = "date"
    PASSWORD = "password"


class Constraint(BaseModel):
    model_config = ConfigDict(frozen=True)

    predicate: Callable[[Any], bool]
    message: str


class FieldDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    kind: FieldKind = FieldKind.TEXT
    label: str = ""
    placeholder: str = ""
    description: str = ""
    required: bool = True
    required_message: Optional[str] = None
    type_message: Optional[str] = None
    constraints: Tuple[Constraint, ...] = ()
    in_record: bool = True

    @property
    def display_name(self) -> str:
        return self.label or self.name

    def missing_message(self) -> str:
        return self.required_message or f"{self.display_name} is required."

    def invalid_type_message(self) -> str:
        return self.type_message or f"{self.display_name} is not a valid {self.kind.value}."


# constraint builders

def matches(pattern: str, message: str) -> Constraint:
    compiled = re.compile(pattern, re.ASCII)
    return Constraint(predicate=lambda v: compiled.fullmatch(v) is not None, message=message)


def min_length(length: int, message: str) -> Constraint:
    return Constraint(predicate=lambda v: len(v) >= length, message=message)


def not_before(earliest: date, message: str) -> Constraint:
    return Constraint(predicate=lambda v: v >= earliest, message=message)


def not_after_today(message: str, today: Callable[[], date] = date.today) -> Constraint:
    # today() is evaluated on every check
    return Constraint(predicate=lambda v: v <= today(), message=message)


# coercion

_DATETIME = TypeAdapter(datetime)

# extended ISO calendar date, optionally followed by a time part
_ISO_DATE = re.compile(r"(\d{4}-\d{2}-\d{2})([T ].+)?", re.ASCII)


def _coerce_text(raw: Any) -> str:
    if not isinstance(raw, str):
        raise ValueError(f"expected str, got {type(raw).__name__}")
    return raw


def _coerce_email(raw: Any) -> str:
    # bare addresses only, "Name <addr>" is rejected
    try:
        return validate_email(_coerce_text(raw).strip(), check_deliverability=False).normalized
    except EmailNotValidError as exc:
        raise ValueError(str(exc)) from exc


def _coerce_date(raw: Any) -> date:
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw

    text = _coerce_text(raw).strip()
    match = _ISO_DATE.fullmatch(text)
    if match is None:
        raise ValueError(f"not an ISO date: {text!r}")
    if match.group(2) is None:
        return date.fromisoformat(text)
    # calendar pickers hand back full ISO timestamps
    return _DATETIME.validate_python(text).date()


_COERCERS: Dict[FieldKind, Callable[[Any], Any]] = {
    FieldKind.TEXT: _coerce_text,
    FieldKind.EMAIL: _coerce_email,
    FieldKind.DATE: _coerce_date,
    FieldKind.PASSWORD: _coerce_text,
}


def is_blank(raw: Any) -> bool:
    return raw is None or (isinstance(raw, str) and raw.strip() == "")


def check_field(descriptor: FieldDescriptor, raw: Any) -> Any:
    """
    Coerce ``raw`` to the field's type and run its constraints in declared
    order. Returns the typed value (None for a blank optional field).

    Raises FieldConstraintError for a blank required field or the first
    failing constraint, FieldTypeError when coercion fails.
    """
    if is_blank(raw):
        if descriptor.required:
            raise FieldConstraintError(descriptor.name, descriptor.missing_message())
        return None

    try:
        value = _COERCERS[descriptor.kind](raw)
    except ValueError as exc:
        raise FieldTypeError(descriptor.name, descriptor.invalid_type_message()) from exc

    for constraint in descriptor.constraints:
        if not constraint.predicate(value):
            raise FieldConstraintError(descriptor.name, constraint.message)

    return value


def validate_field(descriptor: FieldDescriptor, raw: Any) -> ValidationResult:
    try:
        value = check_field(descriptor, raw)
    except (FieldTypeError, FieldConstraintError) as exc:
        return Invalid.from_error(exc)
    return Valid(values={descriptor.name: value})
