"""Guidance client for an OpenAI-compatible chat-completion API.

Turns one piece of free text into one GuidanceResult. The provider is asked
for a JSON object, and it returns that object as a JSON string inside the
completion envelope, so the response is decoded twice.
"""

import json
import time
import uuid
from typing import Callable, Optional

import httpx
from pydantic import ValidationError

from anchor.config import AnchorConfig, usable_api_key
from anchor.errors import (
    ConfigurationError,
    DecodingError,
    EmptyResponseError,
    EncodingError,
    GuidanceError,
    TransportError,
)
from anchor.models import (
    CompletionRequest,
    CompletionResponse,
    GuidancePayload,
    GuidanceResult,
    ResponseFormat,
)
from anchor.prompt import build_messages
from anchor.telemetry import log_guidance

KeySource = Callable[[], Optional[str]]


def decode_guidance(body: bytes) -> GuidanceResult:
    """Decode a completion response body into a GuidanceResult.

    Args:
        body: Raw HTTP response body.

    Returns:
        The guidance from the first choice, with a fresh id.

    Raises:
        DecodingError: If the envelope or the inner payload is malformed.
        EmptyResponseError: If the envelope has no choices.
    """
    try:
        envelope = CompletionResponse.model_validate_json(body)
    except ValidationError as exc:
        raise DecodingError("invalid completion envelope", exc) from exc

    if not envelope.choices:
        raise EmptyResponseError()

    content = envelope.choices[0].message.content
    try:
        payload = GuidancePayload.model_validate_json(content.encode("utf-8"))
    except (UnicodeEncodeError, ValidationError) as exc:
        raise DecodingError("invalid guidance payload", exc) from exc

    return GuidanceResult.from_payload(payload)


class GuidanceClient:
    """Requests pastoral guidance from the configured completion provider.

    The API key is read once, when the client is built. Without a usable key
    the client still works as an object, but every request fails with
    ConfigurationError before touching the network.

    Each call opens its own HTTP connection, so concurrent calls share nothing
    but the read-only configuration.
    """

    def __init__(
        self,
        config: AnchorConfig,
        key_source: Optional[KeySource] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config
        self._transport = transport
        source = key_source if key_source is not None else config.get_api_key
        self._api_key = usable_api_key(source())

    @property
    def has_api_key(self) -> bool:
        return self._api_key is not None

    def build_request(self, user_input: str) -> CompletionRequest:
        """Build the completion request for one piece of user text."""
        generation = self._config.generation
        return CompletionRequest(
            messages=build_messages(user_input),
            model=self._config.provider.model,
            temperature=generation.temperature,
            max_tokens=generation.max_tokens,
            top_p=generation.top_p,
            stop=generation.stop,
            stream=False,
            response_format=ResponseFormat(type="json_object"),
        )

    @staticmethod
    def encode_request(request: CompletionRequest) -> bytes:
        """Serialize a request to UTF-8 JSON.

        Raises:
            EncodingError: If the body cannot be serialized (for example a
                lone surrogate in the user's text).
        """
        try:
            return json.dumps(request.model_dump(), ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise EncodingError(
                "Failed to encode request: {}".format(exc), exc
            ) from exc

    async def request_guidance(self, user_input: str) -> GuidanceResult:
        """Request guidance for ``user_input``.

        The text is sent verbatim; callers are expected to reject blank input
        before calling.

        Args:
            user_input: What the user shared.

        Returns:
            The decoded GuidanceResult.

        Raises:
            ConfigurationError: No usable API key (no request is sent).
            EncodingError: The request body could not be serialized.
            TransportError: The HTTP exchange failed or returned non-2xx.
            DecodingError: The envelope or payload was malformed.
            EmptyResponseError: The provider returned no choices.
        """
        request_id = "anc-{}".format(uuid.uuid4().hex[:12])
        model = self._config.provider.model
        started = time.monotonic()

        try:
            result = await self._request(user_input)
        except GuidanceError as exc:
            log_guidance(
                request_id=request_id,
                model=model,
                outcome=exc.kind,
                input_chars=len(user_input),
                duration_ms=int((time.monotonic() - started) * 1000),
                error=exc.detail,
            )
            raise

        log_guidance(
            request_id=request_id,
            model=model,
            outcome="success",
            input_chars=len(user_input),
            duration_ms=int((time.monotonic() - started) * 1000),
        )
        return result

    async def _request(self, user_input: str) -> GuidanceResult:
        if self._api_key is None:
            raise ConfigurationError("missing or placeholder API key")

        # Only a hand-built GenerationConfig can fail validation here;
        # load_config rejects bad values up front.
        try:
            request = self.build_request(user_input)
        except ValidationError as exc:
            raise EncodingError(
                "Failed to build request: {}".format(exc), exc
            ) from exc

        body = self.encode_request(request)
        content = await self._post(body, self._api_key)
        return decode_guidance(content)

    async def _post(self, body: bytes, api_key: str) -> bytes:
        """Send one POST to the completions endpoint and return the raw body."""
        provider = self._config.provider
        headers = {
            "Authorization": "Bearer {}".format(api_key),
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(
                timeout=provider.timeout_seconds, transport=self._transport
            ) as client:
                resp = await client.post(
                    provider.completions_url, content=body, headers=headers
                )
                resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise TransportError(
                "Provider returned HTTP {}".format(status), exc, status_code=status
            ) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise TransportError(
                "API request failed: {}: {}".format(type(exc).__name__, exc), exc
            ) from exc

        return resp.content
