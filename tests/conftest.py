from datetime import date

import pytest

from signup.errors import SubmissionError
from signup.schema import build_signup_form
from signup.session import FormSession
from signup.submission import SubmissionOutcome

TODAY = date(2026, 10, 17)


class RecordingHandler:
    def __init__(self, fail_times: int = 0):
        self.records = []
        self.fail_times = fail_times

    async def submit(self, record):
        self.records.append(dict(record))
        if self.fail_times:
            self.fail_times -= 1
            raise SubmissionError("Service unavailable.", status_code=503)
        return SubmissionOutcome(status_code=201, data={"id": len(self.records)})


class ScriptedAdapter:
    def __init__(self, inputs=None):
        self.inputs = dict(inputs or {})
        self.errors = []
        self.failures = []
        self.submitted = []

    def get_raw_step_input(self, step_index):
        return self.inputs[step_index]

    def show_errors(self, step_index, errors):
        self.errors.append((step_index, dict(errors)))

    def show_submission_failure(self, message):
        self.failures.append(message)

    def show_submitted(self, record):
        self.submitted.append(dict(record))


@pytest.fixture
def form():
    return build_signup_form(today=lambda: TODAY)


@pytest.fixture
def handler():
    return RecordingHandler()


@pytest.fixture
def session(form, handler):
    return FormSession(form, handler)


@pytest.fixture
def personal():
    return {"name": "Jane Doe", "email": "jane@mail.com", "dob": "1990-05-17"}


@pytest.fixture
def address():
    return {
        "address1": "1 Main St",
        "address2": "",
        "city": "Springfield",
        "state": "IL",
        "zip": "62701",
    }


@pytest.fixture
def account():
    return {"username": "jane", "password": "s3cret", "confirmPassword": "s3cret"}
