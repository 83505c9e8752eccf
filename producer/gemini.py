"""
Gemini REST client.

This is the only module that talks HTTP. It turns every backend failure into
one of the tagged BackendError subclasses from studio.errors, so callers
never inspect raw error text.

API docs: https://ai.google.dev/gemini-api/docs/text-generation
"""
from typing import Any, Dict, List, Optional, Union

import httpx
import structlog

from studio.config import StudioSettings
from studio.errors import (
    BackendError,
    EmptyResponseError,
    InvalidRequestError,
    ModelNotFoundError,
    PermissionDeniedError,
    TransientBackendError,
    UnknownBackendError,
)

logger = structlog.get_logger()


# =============================================================================
# ERROR CLASSIFICATION
# =============================================================================

TRANSIENT_STATUS_CODES = {429, 500, 503}
TRANSIENT_RPC_STATUSES = {"RESOURCE_EXHAUSTED", "UNAVAILABLE", "INTERNAL"}
UNAUTHORIZED_STATUS_CODES = {401, 403}
UNAUTHORIZED_RPC_STATUSES = {"PERMISSION_DENIED", "UNAUTHENTICATED"}
INVALID_RPC_STATUSES = {"INVALID_ARGUMENT", "FAILED_PRECONDITION", "OUT_OF_RANGE"}


def _error_payload(response: httpx.Response) -> Dict[str, Any]:
    """Google error envelope: {"error": {"code", "message", "status"}}."""
    try:
        data = response.json()
    except ValueError:
        return {"message": response.text[:500]}
    if isinstance(data, list) and data:
        data = data[0]
    if isinstance(data, dict) and isinstance(data.get("error"), dict):
        return data["error"]
    return {"message": str(data)[:500]}


def classify_response_error(response: httpx.Response, model: Optional[str] = None) -> BackendError:
    """Map an HTTP error response to a tagged BackendError."""
    status_code = response.status_code
    payload = _error_payload(response)
    rpc_status = str(payload.get("status") or "").upper()
    message = str(payload.get("message") or response.reason_phrase or "backend error")
    text = f"HTTP {status_code}: {message}"
    details = {"rpc_status": rpc_status} if rpc_status else None

    if (
        status_code in TRANSIENT_STATUS_CODES
        or rpc_status in TRANSIENT_RPC_STATUSES
        or "overloaded" in message.lower()
    ):
        error_cls = TransientBackendError
    elif status_code in UNAUTHORIZED_STATUS_CODES or rpc_status in UNAUTHORIZED_RPC_STATUSES:
        error_cls = PermissionDeniedError
    elif status_code == 404 or rpc_status == "NOT_FOUND":
        error_cls = ModelNotFoundError
    elif status_code == 400 or rpc_status in INVALID_RPC_STATUSES:
        error_cls = InvalidRequestError
    else:
        error_cls = UnknownBackendError

    return error_cls(text, status_code=status_code, model=model, details=details)


# =============================================================================
# SCHEMA CONVERSION
# =============================================================================

def convert_schema_to_gemini(json_schema: dict) -> Optional[dict]:
    """
    Convert a pydantic JSON schema to Gemini's responseSchema format.

    Gemini expects a simplified schema without:
    - $defs (definitions are inlined)
    - additionalProperties
    - title / $schema

    Returns None if the schema contains unsupported features.

    See: https://ai.google.dev/gemini-api/docs/structured-output
    """
    defs = json_schema.get("$defs", {})
    unsupported = False

    def simplify(schema: dict) -> dict:
        nonlocal unsupported

        if "$ref" in schema:
            ref_path = schema["$ref"]
            if ref_path.startswith("#/$defs/") and ref_path[8:] in defs:
                return simplify(defs[ref_path[8:]])
            return {"type": "object"}

        if "additionalProperties" in schema and schema["additionalProperties"] is not False:
            unsupported = True
            return {"type": "object"}

        result = {}
        for key in ("type", "description", "enum"):
            if key in schema:
                result[key] = schema[key]
        if "properties" in schema:
            result["properties"] = {k: simplify(v) for k, v in schema["properties"].items()}
        if "required" in schema:
            result["required"] = schema["required"]
        if "items" in schema:
            result["items"] = simplify(schema["items"])
        return result

    simplified = simplify(json_schema)
    return None if unsupported else simplified


# =============================================================================
# RESPONSE EXTRACTION
# =============================================================================

def _first_candidate_parts(data: dict) -> List[dict]:
    candidates = data.get("candidates") or []
    if not candidates:
        return []
    content = candidates[0].get("content") or {}
    return content.get("parts") or []


def extract_text(data: dict, model: Optional[str] = None) -> str:
    """Concatenated text of the first candidate. Empty text is a failure."""
    parts = _first_candidate_parts(data)
    text = "".join(
        part.get("text", "") for part in parts
        if "text" in part and not part.get("thought")
    )
    if not text.strip():
        finish_reason = None
        if data.get("candidates"):
            finish_reason = data["candidates"][0].get("finishReason")
        raise EmptyResponseError(
            "No response from AI",
            model=model,
            details={"finish_reason": finish_reason} if finish_reason else None,
        )
    return text


def extract_inline_data(data: dict, model: Optional[str] = None) -> str:
    """First inline binary payload (base64) of the first candidate."""
    for part in _first_candidate_parts(data):
        inline = part.get("inlineData") or part.get("inline_data")
        if inline and inline.get("data"):
            return inline["data"]
    raise EmptyResponseError("No inline data in response", model=model)


# =============================================================================
# CLIENT
# =============================================================================

class GeminiClient:
    """
    Thin async client over the Gemini REST API.

    Holds no mutable session state: each request opens its own
    httpx.AsyncClient with the configured timeout.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str,
        timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def _post(self, model: str, method: str, body: dict) -> dict:
        url = f"{self.base_url}/models/{model}:{method}"

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    url,
                    headers={
                        "Content-Type": "application/json",
                        "x-goog-api-key": self._api_key,
                    },
                    json=body,
                )
        except httpx.TimeoutException as e:
            raise TransientBackendError(f"Request timed out: {e}", model=model) from e
        except httpx.TransportError as e:
            raise TransientBackendError(f"Network error: {e}", model=model) from e

        if response.status_code >= 400:
            error = classify_response_error(response, model=model)
            logger.debug(
                "gemini_error_response",
                model=model,
                status_code=response.status_code,
                kind=error.kind.value,
            )
            raise error

        try:
            return response.json()
        except ValueError as e:
            raise EmptyResponseError("Response body is not JSON", model=model) from e

    async def generate_content(
        self,
        model: str,
        prompt: Union[str, List[dict]],
        system_instruction: Optional[str] = None,
        response_schema: Optional[dict] = None,
        response_modalities: Optional[List[str]] = None,
        voice_name: Optional[str] = None,
        aspect_ratio: Optional[str] = None,
    ) -> dict:
        """
        Call models/{model}:generateContent and return the raw response.

        Args:
            prompt: Plain text, or a list of parts
            response_schema: Pydantic JSON schema; enables JSON output
            response_modalities: e.g. ["AUDIO"] or ["IMAGE"]
            voice_name: Prebuilt voice for speech output
            aspect_ratio: Image aspect ratio, e.g. "16:9"
        """
        parts = [{"text": prompt}] if isinstance(prompt, str) else prompt
        body: Dict[str, Any] = {"contents": [{"parts": parts}]}
        generation_config: Dict[str, Any] = {}

        if system_instruction:
            body["systemInstruction"] = {"parts": [{"text": system_instruction}]}

        if response_schema is not None:
            generation_config["responseMimeType"] = "application/json"
            gemini_schema = convert_schema_to_gemini(response_schema)
            if gemini_schema:
                generation_config["responseSchema"] = gemini_schema

        if response_modalities:
            generation_config["responseModalities"] = response_modalities

        if voice_name:
            generation_config["speechConfig"] = {
                "voiceConfig": {"prebuiltVoiceConfig": {"voiceName": voice_name}},
            }

        if aspect_ratio:
            generation_config["imageConfig"] = {"aspectRatio": aspect_ratio}

        if generation_config:
            body["generationConfig"] = generation_config

        logger.debug(
            "calling_gemini",
            model=model,
            prompt_len=len(prompt) if isinstance(prompt, str) else None,
            structured=response_schema is not None,
            modalities=response_modalities,
        )
        return await self._post(model, "generateContent", body)

    async def generate_images(
        self,
        model: str,
        prompt: str,
        number_of_images: int = 1,
        aspect_ratio: str = "16:9",
        output_mime_type: str = "image/jpeg",
    ) -> List[str]:
        """Call an Imagen model via models/{model}:predict. Returns base64 images."""
        body = {
            "instances": [{"prompt": prompt}],
            "parameters": {
                "sampleCount": number_of_images,
                "aspectRatio": aspect_ratio,
                "outputOptions": {"mimeType": output_mime_type},
            },
        }
        data = await self._post(model, "predict", body)
        images = [
            p["bytesBase64Encoded"]
            for p in data.get("predictions") or []
            if p.get("bytesBase64Encoded")
        ]
        if not images:
            raise EmptyResponseError("No image bytes in response", model=model)
        return images


def create_client(ctx, settings: StudioSettings) -> GeminiClient:
    """Build a client for one operation call."""
    return GeminiClient(
        api_key=settings.api_key,
        base_url=settings.api_base_url,
        timeout=settings.request_timeout,
        transport=getattr(ctx, "http_transport", None),
    )
