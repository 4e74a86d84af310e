import logging
from typing import Any, Dict, Mapping, Optional, Protocol, Type, Union

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from signup.errors import SubmissionError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = httpx.Timeout(10.0, connect=5.0)

_RECORD = TypeAdapter(Dict[str, Any])


class SubmissionOutcome(BaseModel):
    status_code: int
    data: Any = None


class SubmissionHandler(Protocol):
    async def submit(self, record: Mapping[str, Any]) -> SubmissionOutcome: ...


def _decode_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class HttpSubmissionHandler:
    """
    POSTs the merged record as ``{envelope: record}`` JSON. Failures raise
    SubmissionError; nothing is retried here.
    """

    def __init__(
        self,
        url: str,
        timeout: Union[float, httpx.Timeout] = DEFAULT_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
        record_model: Optional[Type[BaseModel]] = None,
        envelope: str = "finalData",
    ):
        self.url = url
        self.timeout = timeout
        self.record_model = record_model
        self.envelope = envelope
        self._client = client

    def payload(self, record: Mapping[str, Any]) -> Dict[str, Any]:
        if self.record_model is None:
            body = _RECORD.dump_python(dict(record), mode="json")
        else:
            try:
                model = self.record_model.model_validate(dict(record))
            except ValidationError as exc:
                raise SubmissionError(
                    "Submission record is incomplete or malformed.",
                    payload=exc.errors(include_url=False),
                ) from exc
            body = model.model_dump(mode="json", exclude_none=True)
        return {self.envelope: body}

    async def submit(self, record: Mapping[str, Any]) -> SubmissionOutcome:
        body = self.payload(record)

        if self._client is not None:
            return await self._post(self._client, body)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await self._post(client, body)

    async def _post(self, client: httpx.AsyncClient, body: Dict[str, Any]) -> SubmissionOutcome:
        try:
            response = await client.post(self.url, json=body)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.warning("Submission to %s rejected with status %d", self.url, status)
            raise SubmissionError(
                f"Submission rejected with status {status}.",
                status_code=status,
                payload=_decode_body(exc.response),
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("Submission to %s failed: %s", self.url, exc)
            raise SubmissionError(f"Submission failed: {exc}") from exc

        logger.info("Submission to %s accepted with status %d", self.url, response.status_code)
        return SubmissionOutcome(status_code=response.status_code, data=_decode_body(response))
