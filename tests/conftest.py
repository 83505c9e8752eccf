"""
Pytest Configuration and Fixtures

Shared fixtures for all tests. The Gemini backend is replaced by an
httpx.MockTransport driven by FakeGemini; nothing reaches the network.
"""

import base64
import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Union

import httpx
import pytest

from studio.context import RunContext


# =============================================================================
# RESPONSE BUILDERS
# =============================================================================

def text_response(text: str) -> tuple:
    return 200, {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def json_response(payload: Any) -> tuple:
    return text_response(json.dumps(payload))


def inline_response(data: str, mime_type: str = "image/png") -> tuple:
    return 200, {
        "candidates": [{
            "content": {"parts": [{"inlineData": {"mimeType": mime_type, "data": data}}]},
        }],
    }


def predict_response(images: List[str]) -> tuple:
    return 200, {"predictions": [{"bytesBase64Encoded": image} for image in images]}


def error_response(status_code: int, message: str = "error", rpc_status: str = "") -> tuple:
    return status_code, {"error": {"code": status_code, "message": message, "status": rpc_status}}


def b64(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


# =============================================================================
# FAKE BACKEND
# =============================================================================

@dataclass
class RecordedRequest:
    model: str
    method: str
    body: Dict[str, Any]
    headers: Dict[str, str]

    @property
    def prompt(self) -> str:
        return self.body["contents"][0]["parts"][0]["text"]

    @property
    def system_instruction(self) -> str:
        return self.body["systemInstruction"]["parts"][0]["text"]

    @property
    def generation_config(self) -> Dict[str, Any]:
        return self.body.get("generationConfig", {})


Reply = Union[tuple, Callable[[RecordedRequest], tuple]]


class FakeGemini:
    """
    Scripted stand-in for the Gemini REST API.

    Replies are queued per model and consumed in order; the last reply for
    a model is repeated for any further requests. A reply is either a
    (status, json) tuple or a callable returning one.
    """

    def __init__(self):
        self.replies: Dict[str, List[Reply]] = {}
        self.requests: List[RecordedRequest] = []

    def on(self, model: str, *replies: Reply) -> "FakeGemini":
        self.replies.setdefault(model, []).extend(replies)
        return self

    def requests_for(self, model: str) -> List[RecordedRequest]:
        return [r for r in self.requests if r.model == model]

    def handler(self, request: httpx.Request) -> httpx.Response:
        model, method = request.url.path.rsplit("/", 1)[-1].split(":", 1)
        recorded = RecordedRequest(
            model=model,
            method=method,
            body=json.loads(request.content) if request.content else {},
            headers=dict(request.headers),
        )
        self.requests.append(recorded)

        queue = self.replies.get(model)
        if not queue:
            status_code, payload = error_response(404, f"models/{model} is not found", "NOT_FOUND")
            return httpx.Response(status_code, json=payload)

        reply = queue.pop(0) if len(queue) > 1 else queue[0]
        if callable(reply):
            reply = reply(recorded)
        status_code, payload = reply
        return httpx.Response(status_code, json=payload)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


# =============================================================================
# FIXTURES
# =============================================================================

TEST_SECRETS = {
    "GEMINI_API_KEY": "test-key",
    "TUBEFLOW_RETRY_DELAY": "0",
}


@pytest.fixture
def fake_gemini() -> FakeGemini:
    """Scripted backend; configure with fake_gemini.on(model, ...)."""
    return FakeGemini()


@pytest.fixture
def ctx(fake_gemini) -> RunContext:
    """Context with a test key, zero backoff and the fake backend."""
    return RunContext(
        secrets=dict(TEST_SECRETS),
        http_transport=fake_gemini.transport,
        use_environment=False,
    )


@pytest.fixture
def ctx_without_key(fake_gemini) -> RunContext:
    """Context with no credential at all."""
    return RunContext(
        secrets={"TUBEFLOW_RETRY_DELAY": "0"},
        http_transport=fake_gemini.transport,
        use_environment=False,
    )


@pytest.fixture
def sample_script() -> str:
    return (
        "# Hook\n"
        "Imagine growing **forty pounds** of tomatoes on a fire escape.\n\n"
        "## Section 1\n"
        "Most people think you need a yard. You don't.\n"
    )
