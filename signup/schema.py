"""
The three-step signup form: personal details, address, account setup.
"""
from datetime import date
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from config.settings import FormSettings
from signup.fields import (
    FieldDescriptor,
    FieldKind,
    matches,
    min_length,
    not_after_today,
    not_before,
)
from signup.steps import CrossFieldRule, FormDefinition, StepDescriptor


class SignupRecord(BaseModel):
    """Shape of the record handed to the submission handler."""

    model_config = ConfigDict(extra="forbid")

    name: str
    email: EmailStr
    dob: date
    address1: str
    address2: Optional[str] = Field(default=None, description="Omitted when left blank")
    city: str
    state: str
    zip: str = Field(..., pattern=r"^[0-9]+$")
    username: str
    password: str


def _passwords_match(values) -> bool:
    return values["password"] == values["confirmPassword"]


def build_signup_form(
    settings: Optional[FormSettings] = None,
    today: Callable[[], date] = date.today,
) -> FormDefinition:
    settings = settings or FormSettings()
    min_pw = settings.password_min_length
    pw_message = f"Password must be at least {min_pw} characters."

    personal = StepDescriptor(
        index=0,
        title="Personal Details",
        fields=(
            FieldDescriptor(
                name="name",
                label="Name",
                placeholder="Enter your name",
                required_message="Name is required.",
            ),
            FieldDescriptor(
                name="email",
                kind=FieldKind.EMAIL,
                label="Email",
                placeholder="Enter your email",
                required_message="Invalid email address.",
                type_message="Invalid email address.",
            ),
            FieldDescriptor(
                name="dob",
                kind=FieldKind.DATE,
                label="Date of Birth",
                placeholder="Pick a date",
                description="Your date of birth is used to calculate your age.",
                required_message="A date of birth is required.",
                type_message="Invalid date of birth.",
                constraints=(
                    not_before(
                        settings.min_dob,
                        f"Date of birth cannot be before {settings.min_dob.isoformat()}.",
                    ),
                    not_after_today("Date of birth cannot be in the future.", today=today),
                ),
            ),
        ),
    )

    address = StepDescriptor(
        index=1,
        title="Address",
        fields=(
            FieldDescriptor(
                name="address1",
                label="Address Line 1",
                placeholder="Enter your address",
                required_message="Address Line 1 is required.",
            ),
            FieldDescriptor(
                name="address2",
                label="Address Line 2 (Optional)",
                placeholder="Enter your address (Optional)",
                required=False,
            ),
            FieldDescriptor(
                name="city",
                label="City",
                placeholder="Enter your city",
                required_message="City is required.",
            ),
            FieldDescriptor(
                name="state",
                label="State",
                placeholder="Enter your state",
                required_message="State is required.",
            ),
            FieldDescriptor(
                name="zip",
                label="Zip Code",
                placeholder="Enter your zip code",
                required_message="Zip code is required.",
                constraints=(matches(r"[0-9]+", "Zip code must be a number."),),
            ),
        ),
    )

    account = StepDescriptor(
        index=2,
        title="Account Setup",
        fields=(
            FieldDescriptor(
                name="username",
                label="Username",
                placeholder="Enter your username",
                required_message="Username is required.",
            ),
            FieldDescriptor(
                name="password",
                kind=FieldKind.PASSWORD,
                label="Password",
                placeholder="Enter your password",
                required_message=pw_message,
                constraints=(min_length(min_pw, pw_message),),
            ),
            FieldDescriptor(
                name="confirmPassword",
                kind=FieldKind.PASSWORD,
                label="Confirm Password",
                placeholder="Confirm your password",
                required_message="Confirm Password is required.",
                in_record=False,
            ),
        ),
        cross_field_rule=CrossFieldRule(
            predicate=_passwords_match,
            message="Passwords must match.",
            field="confirmPassword",
        ),
    )

    return FormDefinition(steps=(personal, address, account))
