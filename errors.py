"""Error taxonomy for the Stability AI MCP Server"""

from typing import Optional


class StabilityError(Exception):
    """Base class for every error raised by the Stability AI integration"""


class ConfigurationError(StabilityError):
    """Missing API key or invalid configuration value (fatal at startup)"""


class ValidationError(StabilityError, ValueError):
    """Invalid tool input, detected before any network call"""


class UnknownVariantError(ValidationError):
    """Category or variant has no registered endpoint"""

    def __init__(self, category: str, variant: str, known=()):
        self.category = category
        self.variant = variant
        message = f"Unknown {category} variant '{variant}'"
        if known:
            message += f". Expected one of: {', '.join(known)}"
        super().__init__(message)


class InputFileNotFoundError(ValidationError):
    """A file-path parameter references a file that does not exist"""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"File not found: {path}")


class StabilityAPIError(StabilityError):
    """Upstream answered with a non-2xx status"""

    def __init__(self, message: str, status_code: int, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class AuthenticationError(StabilityAPIError):
    pass


class InsufficientCreditsError(StabilityAPIError):
    pass


class RateLimitError(StabilityAPIError):
    pass


class StabilityTimeoutError(StabilityError):
    """No response was received in time"""


class RequestTimeoutError(StabilityTimeoutError):
    pass


class JobTimeoutError(StabilityTimeoutError):
    def __init__(self, job_id: str, attempts: int, waited_seconds: float):
        self.job_id = job_id
        self.attempts = attempts
        self.waited_seconds = waited_seconds
        super().__init__(
            f"Async generation {job_id} timed out after {waited_seconds:g} seconds "
            f"({attempts} polls without a result)"
        )


class ProtocolError(StabilityError):
    """Upstream response was missing a field the protocol requires"""


class StabilityConnectionError(StabilityError):
    """The request never reached the API (DNS, refused connection, TLS...)"""


def classify_http_error(status_code: int, body: str, context: Optional[str] = None) -> StabilityAPIError:
    """Map a non-2xx status to the matching StabilityAPIError subclass.

    Every call site goes through here so callers can rely on the exception type
    (and its ``status_code``/``body``) instead of parsing messages.
    """
    detail = f"(HTTP {status_code}): {body}" if body else f"(HTTP {status_code})"
    prefix = f"{context} failed: " if context else ""

    if status_code in (401, 403):
        return AuthenticationError(
            f"{prefix}Invalid Stability AI API key. Please check your STABILITY_API_KEY "
            f"environment variable {detail}",
            status_code,
            body,
        )
    if status_code == 402:
        return InsufficientCreditsError(
            f"{prefix}Insufficient credits. Please add credits at platform.stability.ai {detail}",
            status_code,
            body,
        )
    if status_code == 429:
        return RateLimitError(
            f"{prefix}Stability AI API rate limit exceeded. Please wait a moment and try again {detail}",
            status_code,
            body,
        )
    return StabilityAPIError(f"{prefix}Stability AI error {detail}", status_code, body)
