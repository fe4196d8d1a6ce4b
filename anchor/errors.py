"""Failure kinds for a single guidance request.

Every failure is terminal for the call that raised it; nothing is retried.
The kinds exist for diagnostics; callers may collapse them into one
user-visible error state.
"""

from typing import Optional


class GuidanceError(Exception):
    """Base class for every failure of ``GuidanceClient.request_guidance``."""

    kind = "guidance_error"

    def __init__(self, detail: str, cause: Optional[BaseException] = None) -> None:
        self.detail = detail
        self.cause = cause
        super().__init__(detail)


class ConfigurationError(GuidanceError):
    """No usable API key was configured. Raised before any network I/O."""

    kind = "configuration_error"


class EncodingError(GuidanceError):
    """The request body could not be serialized."""

    kind = "encoding_error"


class TransportError(GuidanceError):
    """The HTTP exchange failed (network, timeout, TLS, or non-2xx status)."""

    kind = "transport_error"

    def __init__(
        self,
        detail: str,
        cause: Optional[BaseException] = None,
        status_code: Optional[int] = None,
    ) -> None:
        self.status_code = status_code
        super().__init__(detail, cause)


class DecodingError(GuidanceError):
    """The envelope or the guidance payload did not match the expected shape."""

    kind = "decoding_error"


class EmptyResponseError(GuidanceError):
    """The completion endpoint returned zero choices."""

    kind = "empty_response"

    def __init__(self, detail: str = "API returned no content.") -> None:
        super().__init__(detail)
