import asyncio
import getpass
import logging
from typing import Any, Dict, Mapping, Optional

from config.settings import FormSettings
from signup.adapter import step_labels
from signup.fields import FieldKind
from signup.schema import SignupRecord, build_signup_form
from signup.session import FormSession
from signup.state import SubmissionStatus
from signup.submission import HttpSubmissionHandler


class ConsoleAdapter:
    """Renders the active step on stdin/stdout."""

    def __init__(self, session: Optional[FormSession] = None):
        self.session = session

    def get_raw_step_input(self, step_index: int) -> Dict[str, Any]:
        view = self.session.current_view()
        labels = step_labels(self.session.form)
        trail = " > ".join(
            f"[{title}]" if i == step_index else title for i, title in labels.items()
        )
        print(f"\n{trail}")

        values: Dict[str, Any] = {}
        for field in view.fields:
            prompt = field.label
            if field.value is not None and field.kind is not FieldKind.PASSWORD:
                prompt += f" [{field.value}]"
            prompt += ": "

            if field.kind is FieldKind.PASSWORD:
                raw = getpass.getpass(prompt)
            else:
                raw = input(prompt)

            # empty input keeps the value from an earlier pass
            if raw == "" and field.value is not None:
                values[field.name] = field.value
            else:
                values[field.name] = raw
        return values

    def show_errors(self, step_index: int, errors: Mapping[str, str]) -> None:
        for name, message in errors.items():
            print(f"  {name}: {message}")

    def show_submission_failure(self, message: str) -> None:
        print(f"Submission failed: {message}")

    def show_submitted(self, record: Mapping[str, Any]) -> None:
        print("Success! Your form has been submitted successfully.")


async def run(session: FormSession) -> SubmissionStatus:
    while not session.is_submitted:
        if session.current_step > 0:
            choice = input("[n]ext / [b]ack / [q]uit: ").strip().lower()
            if choice == "b":
                session.retreat()
                continue
            if choice == "q":
                session.reset()
                return session.submission_status
        await session.advance()
        if session.last_outcome is not None:
            # the session may already have been reset
            return SubmissionStatus.SUCCEEDED

    while session.submission_status is SubmissionStatus.FAILED:
        if input("Retry submission? [y/N]: ").strip().lower() != "y":
            break
        await session.retry_submission()

    return session.submission_status


def main():
    settings = FormSettings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    form = build_signup_form(settings)
    handler = HttpSubmissionHandler(
        settings.submit_url,
        timeout=settings.submit_timeout,
        record_model=SignupRecord,
    )

    adapter = ConsoleAdapter()
    session = FormSession(form, handler, adapter, reset_on_success=settings.reset_on_success)
    adapter.session = session

    status = asyncio.run(run(session))
    print("Final submission status:", status.value)


if __name__ == "__main__":
    main()
