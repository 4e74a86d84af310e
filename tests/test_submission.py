import asyncio
import json
from datetime import date

import httpx
import pytest

from signup.errors import SubmissionError
from signup.schema import SignupRecord
from signup.submission import HttpSubmissionHandler

URL = "https://forms.test/api/multistepform"

RECORD = {
    "name": "Jane Doe",
    "email": "jane@mail.com",
    "dob": date(1990, 5, 17),
    "address1": "1 Main St",
    "city": "Springfield",
    "state": "IL",
    "zip": "62701",
    "username": "jane",
    "password": "s3cret",
}


def _handler(responder, **kwargs):
    client = httpx.AsyncClient(transport=httpx.MockTransport(responder))
    return HttpSubmissionHandler(URL, client=client, **kwargs)


def test_posts_record_in_envelope():
    seen = []

    def responder(request):
        seen.append(request)
        return httpx.Response(201, json={"id": 7})

    outcome = asyncio.run(_handler(responder).submit(RECORD))

    assert outcome.status_code == 201
    assert outcome.data == {"id": 7}
    assert len(seen) == 1
    assert seen[0].method == "POST"
    assert str(seen[0].url) == URL
    body = json.loads(seen[0].content)
    assert body["finalData"]["dob"] == "1990-05-17"
    assert body["finalData"]["username"] == "jane"


def test_record_model_shapes_payload():
    seen = []

    def responder(request):
        seen.append(json.loads(request.content))
        return httpx.Response(200, text="ok")

    outcome = asyncio.run(
        _handler(responder, record_model=SignupRecord).submit({**RECORD, "address2": None})
    )

    assert outcome.data == "ok"
    assert "address2" not in seen[0]["finalData"]
    assert seen[0]["finalData"]["email"] == "jane@mail.com"


def test_incomplete_record_is_rejected_before_sending():
    def responder(request):
        raise AssertionError("nothing should be sent")

    record = {k: v for k, v in RECORD.items() if k != "password"}
    with pytest.raises(SubmissionError) as exc:
        asyncio.run(_handler(responder, record_model=SignupRecord).submit(record))
    assert exc.value.status_code is None


def test_record_model_rejects_non_ascii_zip():
    def responder(request):
        raise AssertionError("nothing should be sent")

    with pytest.raises(SubmissionError):
        asyncio.run(
            _handler(responder, record_model=SignupRecord).submit({**RECORD, "zip": "１２３４５"})
        )


def test_error_status_raises_submission_error():
    def responder(request):
        return httpx.Response(422, json={"detail": "username taken"})

    with pytest.raises(SubmissionError) as exc:
        asyncio.run(_handler(responder).submit(RECORD))

    assert exc.value.status_code == 422
    assert exc.value.payload == {"detail": "username taken"}
    assert "422" in exc.value.message


def test_transport_failure_raises_submission_error():
    def responder(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(SubmissionError) as exc:
        asyncio.run(_handler(responder).submit(RECORD))
    assert "connection refused" in exc.value.message


def test_custom_envelope():
    seen = []

    def responder(request):
        seen.append(json.loads(request.content))
        return httpx.Response(204)

    outcome = asyncio.run(_handler(responder, envelope="record").submit(RECORD))
    assert outcome.status_code == 204
    assert set(seen[0]) == {"record"}
