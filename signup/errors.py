from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    TYPE = "type"
    CONSTRAINT = "constraint"
    CROSS_FIELD = "cross_field"


class FormError(Exception):
    """Base class for every error raised by the signup form."""


class FieldError(FormError):
    """
    A validation failure attributed to a single field.

    Raised inside field/step validation and converted into an Invalid result
    by the step validator; callers of validate_step never see it.
    """

    kind: ErrorKind

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


class FieldTypeError(FieldError):
    kind = ErrorKind.TYPE


class FieldConstraintError(FieldError):
    kind = ErrorKind.CONSTRAINT


class CrossFieldError(FieldError):
    kind = ErrorKind.CROSS_FIELD


class SubmissionError(FormError):
    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        payload: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload


class TransitionError(FormError):
    """The requested operation is not allowed in the session's current state."""


class SubmissionInFlightError(TransitionError):
    pass
