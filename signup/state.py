from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from signup.results import Invalid, Valid


class FormStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"


class SubmissionStatus(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class FormState(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    current_step: int = Field(default=0, ge=0, description="Index of the active step")
    status: FormStatus = Field(default=FormStatus.IN_PROGRESS)
    accumulated: Dict[str, Any] = Field(
        default_factory=dict, description="Typed values of every validated step"
    )
    draft: Dict[str, Any] = Field(
        default_factory=dict, description="Raw input of the last attempt on the active step"
    )
    field_errors: Dict[str, str] = Field(default_factory=dict)
    last_result: Optional[Union[Valid, Invalid]] = None

    submission_status: SubmissionStatus = Field(default=SubmissionStatus.IDLE)
    submission_error: Optional[str] = None
