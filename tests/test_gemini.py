"""
Tests for Gemini Client

Tests for producer/gemini.py
"""

from typing import List

import httpx
import pytest
from pydantic import TypeAdapter

from producer.gemini import (
    GeminiClient,
    classify_response_error,
    convert_schema_to_gemini,
    extract_inline_data,
    extract_text,
)
from studio.errors import (
    EmptyResponseError,
    ErrorKind,
    InvalidRequestError,
    ModelNotFoundError,
    PermissionDeniedError,
    TransientBackendError,
    UnknownBackendError,
)
from studio.models import ThumbnailConcept

from conftest import error_response, inline_response, predict_response, text_response


def _response(status_code, message="error", rpc_status=""):
    _, payload = error_response(status_code, message, rpc_status)
    return httpx.Response(status_code, json=payload)


class TestClassifyResponseError:
    """Tests for HTTP error -> tagged error mapping."""

    @pytest.mark.parametrize("status_code", [429, 500, 503])
    def test_transient_status_codes(self, status_code):
        error = classify_response_error(_response(status_code), model="m")

        assert isinstance(error, TransientBackendError)
        assert error.kind is ErrorKind.TRANSIENT
        assert error.status_code == status_code
        assert error.model == "m"

    def test_overloaded_message_is_transient(self):
        error = classify_response_error(_response(502, "The model is overloaded. Please try again later."))
        assert error.kind is ErrorKind.TRANSIENT

    def test_rpc_status_is_transient(self):
        error = classify_response_error(_response(502, "quota", "RESOURCE_EXHAUSTED"))
        assert error.kind is ErrorKind.TRANSIENT

    def test_gateway_error_without_hint_is_unknown(self):
        error = classify_response_error(_response(502, "Bad gateway"))
        assert isinstance(error, UnknownBackendError)

    @pytest.mark.parametrize("status_code,rpc_status", [
        (403, "PERMISSION_DENIED"),
        (401, "UNAUTHENTICATED"),
        (400, "PERMISSION_DENIED"),
    ])
    def test_permission_denied(self, status_code, rpc_status):
        error = classify_response_error(_response(status_code, "denied", rpc_status))
        assert isinstance(error, PermissionDeniedError)
        assert error.kind is ErrorKind.UNAUTHORIZED

    def test_not_found(self):
        error = classify_response_error(_response(404, "models/x is not found", "NOT_FOUND"))
        assert isinstance(error, ModelNotFoundError)

    def test_invalid_argument(self):
        error = classify_response_error(_response(400, "bad field", "INVALID_ARGUMENT"))
        assert isinstance(error, InvalidRequestError)

    def test_message_format(self):
        error = classify_response_error(_response(503, "Service unavailable"))
        assert error.message == "HTTP 503: Service unavailable"

    def test_non_json_error_body(self):
        error = classify_response_error(httpx.Response(500, text="<html>oops</html>"))
        assert isinstance(error, TransientBackendError)
        assert "oops" in error.message


class TestSchemaConversion:
    """Tests for convert_schema_to_gemini."""

    def test_inlines_definitions(self):
        schema = TypeAdapter(List[ThumbnailConcept]).json_schema()

        result = convert_schema_to_gemini(schema)

        assert result["type"] == "array"
        item = result["items"]
        assert item["type"] == "object"
        assert set(item["properties"]) == {"headline", "visualDescription", "reasoning"}
        assert "$defs" not in result
        assert "title" not in item

    def test_free_form_dict_is_unsupported(self):
        schema = {"type": "object", "additionalProperties": {"type": "string"}}
        assert convert_schema_to_gemini(schema) is None


class TestExtraction:
    """Tests for response payload extraction."""

    def test_extract_text_skips_thoughts(self):
        data = {"candidates": [{"content": {"parts": [
            {"text": "thinking...", "thought": True},
            {"text": "Hello "},
            {"text": "world"},
        ]}}]}

        assert extract_text(data) == "Hello world"

    def test_extract_text_empty_raises(self):
        with pytest.raises(EmptyResponseError) as exc_info:
            extract_text({"candidates": [{"content": {"parts": []}, "finishReason": "SAFETY"}]})

        assert exc_info.value.message == "No response from AI"
        assert exc_info.value.details["finish_reason"] == "SAFETY"

    def test_extract_text_no_candidates(self):
        with pytest.raises(EmptyResponseError):
            extract_text({})

    def test_extract_inline_data(self):
        _, data = inline_response("aGVsbG8=")
        assert extract_inline_data(data) == "aGVsbG8="

    def test_extract_inline_data_missing(self):
        _, data = text_response("just text")
        with pytest.raises(EmptyResponseError):
            extract_inline_data(data)


class TestGeminiClient:
    """Tests for GeminiClient against a mock transport."""

    def _client(self, fake_gemini):
        return GeminiClient(
            api_key="secret",
            base_url="https://example.test/v1beta/",
            transport=fake_gemini.transport,
        )

    @pytest.mark.asyncio
    async def test_request_shape(self, fake_gemini):
        fake_gemini.on("gemini-2.5-flash", text_response("hi"))

        await self._client(fake_gemini).generate_content(
            "gemini-2.5-flash",
            "Say hi",
            system_instruction="Be brief",
            response_schema={"type": "object", "properties": {"a": {"type": "string"}}},
        )

        request = fake_gemini.requests[0]
        assert request.method == "generateContent"
        assert request.headers["x-goog-api-key"] == "secret"
        assert request.prompt == "Say hi"
        assert request.system_instruction == "Be brief"
        assert request.generation_config["responseMimeType"] == "application/json"
        assert request.generation_config["responseSchema"]["properties"]["a"] == {"type": "string"}

    @pytest.mark.asyncio
    async def test_speech_config(self, fake_gemini):
        fake_gemini.on("tts", inline_response("AAAA", "audio/pcm"))

        await self._client(fake_gemini).generate_content(
            "tts", "Hello", response_modalities=["AUDIO"], voice_name="Puck",
        )

        config = fake_gemini.requests[0].generation_config
        assert config["responseModalities"] == ["AUDIO"]
        assert config["speechConfig"]["voiceConfig"]["prebuiltVoiceConfig"]["voiceName"] == "Puck"

    @pytest.mark.asyncio
    async def test_error_status_is_classified(self, fake_gemini):
        fake_gemini.on("m", error_response(403, "denied", "PERMISSION_DENIED"))

        with pytest.raises(PermissionDeniedError) as exc_info:
            await self._client(fake_gemini).generate_content("m", "x")

        assert exc_info.value.model == "m"

    @pytest.mark.asyncio
    async def test_transport_error_is_transient(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = GeminiClient("k", "https://example.test", transport=httpx.MockTransport(handler))

        with pytest.raises(TransientBackendError):
            await client.generate_content("m", "x")

    @pytest.mark.asyncio
    async def test_timeout_is_transient(self):
        def handler(request):
            raise httpx.ReadTimeout("too slow", request=request)

        client = GeminiClient("k", "https://example.test", transport=httpx.MockTransport(handler))

        with pytest.raises(TransientBackendError) as exc_info:
            await client.generate_content("m", "x")

        assert "timed out" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_non_json_success_body(self):
        client = GeminiClient(
            "k",
            "https://example.test",
            transport=httpx.MockTransport(lambda request: httpx.Response(200, text="<html/>")),
        )

        with pytest.raises(EmptyResponseError):
            await client.generate_content("m", "x")

    @pytest.mark.asyncio
    async def test_generate_images(self, fake_gemini):
        fake_gemini.on("imagen", predict_response(["img1"]))

        images = await self._client(fake_gemini).generate_images("imagen", "a cat", aspect_ratio="16:9")

        assert images == ["img1"]
        request = fake_gemini.requests[0]
        assert request.method == "predict"
        assert request.body["instances"] == [{"prompt": "a cat"}]
        assert request.body["parameters"]["aspectRatio"] == "16:9"

    @pytest.mark.asyncio
    async def test_generate_images_empty(self, fake_gemini):
        fake_gemini.on("imagen", predict_response([]))

        with pytest.raises(EmptyResponseError):
            await self._client(fake_gemini).generate_images("imagen", "a cat")
