import os
from datetime import date

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

load_dotenv()


class FormSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    submit_url: str = Field(default="http://localhost:3000/api/multistepform")
    submit_timeout: float = Field(default=10.0, gt=0, description="Seconds")
    min_dob: date = Field(default=date(1900, 1, 1), description="Earliest accepted date of birth")
    password_min_length: int = Field(default=4, ge=1)
    reset_on_success: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "FormSettings":
        return cls(
            submit_url=os.environ["SIGNUP_SUBMIT_URL"],
            submit_timeout=os.getenv("SIGNUP_SUBMIT_TIMEOUT", "10"),
            min_dob=os.getenv("SIGNUP_MIN_DOB", "1900-01-01"),
            password_min_length=os.getenv("SIGNUP_PASSWORD_MIN_LENGTH", "4"),
            reset_on_success=os.getenv("SIGNUP_RESET_ON_SUCCESS", "false"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
