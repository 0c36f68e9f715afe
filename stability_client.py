import logging
from typing import Any, Callable, Dict, Mapping, Optional, Union

import requests

from errors import (
    ProtocolError,
    RequestTimeoutError,
    StabilityConnectionError,
    classify_http_error,
)
from managers.endpoint_registry import BALANCE_ENDPOINT, EndpointRegistry, results_path
from managers.job_poller import MAX_POLL_ATTEMPTS, POLL_INTERVAL_SECONDS, AsyncJobPoller
from managers.request_builder import DEFAULT_OUTPUT_FORMAT, RequestBuilder
from models.config import StabilityConfig
from models.multipart import MultipartBody
from models.operation import Category, OperationDescriptor
from models.result import BalanceResult, GenerationResult

logger = logging.getLogger("StabilityClient")

ACCEPT_IMAGE = "image/*"
ACCEPT_JSON = "application/json"
SEED_HEADERS = ("seed", "x-seed")
FINISH_REASON_HEADER = "finish-reason"


def format_from_content_type(content_type: Optional[str]) -> str:
    content_type = (content_type or "image/png").lower()
    if "jpeg" in content_type:
        return "jpeg"
    if "webp" in content_type:
        return "webp"
    return DEFAULT_OUTPUT_FORMAT


def decode_image_response(response: requests.Response, fixed_format: Optional[str] = None) -> GenerationResult:
    """Read a binary response into a GenerationResult.

    Seed and finish reason are best effort; a missing or malformed header
    leaves the value unset.
    """
    data = response.content
    if fixed_format:
        return GenerationResult(data=data, format=fixed_format)

    seed = None
    for header in SEED_HEADERS:
        raw_seed = response.headers.get(header)
        if raw_seed:
            try:
                seed = int(raw_seed.strip())
            except ValueError:
                logger.debug("Ignoring non-numeric %s header %r", header, raw_seed)
            break

    return GenerationResult(
        data=data,
        format=format_from_content_type(response.headers.get("content-type")),
        seed=seed,
        finish_reason=response.headers.get(FINISH_REASON_HEADER) or None,
    )


class StabilityClient:
    """Dispatches operations to the Stability AI REST API.

    Every tool call goes through :meth:`dispatch`. The client keeps no state
    between calls apart from the read-only configuration and HTTP session.
    """

    def __init__(
        self,
        config: StabilityConfig,
        session: Optional[requests.Session] = None,
        registry: Optional[EndpointRegistry] = None,
        builder: Optional[RequestBuilder] = None,
        poll_interval: float = POLL_INTERVAL_SECONDS,
        max_poll_attempts: int = MAX_POLL_ATTEMPTS,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self.config = config
        self.session = session or requests.Session()
        self.registry = registry or EndpointRegistry()
        self.builder = builder or RequestBuilder()
        self.poll_interval = poll_interval
        self.max_poll_attempts = max_poll_attempts
        self._sleep = sleep

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def dispatch(
        self,
        category: Union[Category, str],
        variant: Optional[str],
        params: Mapping[str, Any],
    ) -> GenerationResult:
        """Run one operation and return its binary result.

        Resolution and body construction happen before any network I/O, so
        invalid input never produces a request. Failures are raised as-is;
        nothing is retried.
        """
        descriptor = self.registry.resolve(category, variant)
        body = self.builder.build(descriptor, params)
        logger.info("Dispatching %s (%s) to %s", descriptor.name, descriptor.mode.value, descriptor.path)

        if descriptor.is_async:
            return self._run_async(descriptor, body)
        return self._run_sync(descriptor, body)

    def check_balance(self) -> BalanceResult:
        response = self._request(
            "GET",
            BALANCE_ENDPOINT,
            accept=ACCEPT_JSON,
            timeout=self.config.timeout_seconds,
            context="Balance check",
        )
        data = self._json(response)
        if "credits" not in data:
            raise ProtocolError("Balance response did not include a credits value")
        credits = data["credits"]
        if isinstance(credits, bool):
            raise ProtocolError(f"Balance response had a non-numeric credits value: {credits!r}")
        try:
            return BalanceResult(credits=float(credits))
        except (TypeError, ValueError):
            raise ProtocolError(f"Balance response had a non-numeric credits value: {credits!r}") from None

    def close(self):
        self.session.close()

    # ------------------------------------------------------------------
    # Execution modes
    # ------------------------------------------------------------------

    def _run_sync(self, descriptor: OperationDescriptor, body: MultipartBody) -> GenerationResult:
        response = self._request(
            "POST",
            descriptor.path,
            accept=descriptor.accept,
            timeout=self.config.image_timeout_seconds,
            body=body,
        )
        result = decode_image_response(response, fixed_format=descriptor.result_format)
        logger.info("%s returned %s bytes (%s)", descriptor.name, result.bytes_size, result.format)
        return result

    def _run_async(self, descriptor: OperationDescriptor, body: MultipartBody) -> GenerationResult:
        def submit() -> Dict[str, Any]:
            response = self._request(
                "POST",
                descriptor.path,
                accept=ACCEPT_JSON,
                timeout=self.config.timeout_seconds,
                body=body,
            )
            return self._json(response)

        def fetch_result(job_id: str) -> requests.Response:
            return self._request(
                "GET",
                results_path(job_id),
                accept=ACCEPT_IMAGE,
                timeout=self.config.image_timeout_seconds,
                allowed_status=(202,),
            )

        poller_kwargs = {}
        if self._sleep is not None:
            poller_kwargs["sleep"] = self._sleep
        poller = AsyncJobPoller(
            submit=submit,
            fetch_result=fetch_result,
            decode=decode_image_response,
            poll_interval=self.poll_interval,
            max_attempts=self.max_poll_attempts,
            **poller_kwargs,
        )
        return poller.run()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _request(
        self,
        method: str,
        path: str,
        accept: str,
        timeout: float,
        body: Optional[MultipartBody] = None,
        allowed_status=(),
        context: Optional[str] = None,
    ) -> requests.Response:
        """Issue one authorized request and classify failures.

        Statuses in ``allowed_status`` are returned to the caller instead of
        being raised (the results endpoint answers 202 while a job runs).
        """
        url = f"{self.config.base_url}{path}"
        headers = {
            "Authorization": f"Bearer {self.config.api_key}",
            "Accept": accept,
        }
        files = body.to_requests_files() if body is not None else None

        try:
            response = self.session.request(method, url, headers=headers, files=files, timeout=timeout)
        except requests.Timeout as exc:
            raise RequestTimeoutError(
                f"Stability AI API request timed out after {timeout:g} seconds. Please try again."
            ) from exc
        except requests.RequestException as exc:
            raise StabilityConnectionError(f"Could not reach Stability AI API: {exc}") from exc

        if response.status_code in allowed_status:
            return response
        if not response.ok:
            logger.warning("%s %s returned HTTP %s", method, path, response.status_code)
            raise classify_http_error(response.status_code, response.text, context=context)
        return response

    def _json(self, response: requests.Response) -> Dict[str, Any]:
        try:
            data = response.json()
        except ValueError as exc:
            raise ProtocolError(f"Expected a JSON response from Stability AI: {exc}") from exc
        if not isinstance(data, dict):
            raise ProtocolError("Expected a JSON object from Stability AI")
        return data
