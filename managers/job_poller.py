"""Submit-then-poll execution for asynchronous Stability AI operations"""

import logging
import time
from typing import Any, Callable, Dict, Optional

import requests

from errors import JobTimeoutError, ProtocolError, classify_http_error
from models.result import AsyncJob, GenerationResult, JobState

logger = logging.getLogger("StabilityClient")

POLL_INTERVAL_SECONDS = 5
MAX_POLL_ATTEMPTS = 60
PENDING_STATUS = 202


class AsyncJobPoller:
    """Drives one job from SUBMITTED to SUCCEEDED, FAILED or TIMED_OUT.

    The poller owns the state machine only. Network calls and decoding are
    passed in, which keeps the terminal conditions testable with a fake
    results endpoint and a no-op ``sleep``.

    Args:
        submit: Sends the job and returns the parsed JSON submission response
        fetch_result: GETs the results endpoint for a job id
        decode: Turns the terminal success response into a GenerationResult
        poll_interval: Seconds to wait before every poll
        max_attempts: Polls allowed before the job is abandoned
        sleep: Delay function, ``time.sleep`` outside of tests
    """

    def __init__(
        self,
        submit: Callable[[], Dict[str, Any]],
        fetch_result: Callable[[str], requests.Response],
        decode: Callable[[requests.Response], GenerationResult],
        poll_interval: float = POLL_INTERVAL_SECONDS,
        max_attempts: int = MAX_POLL_ATTEMPTS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.submit = submit
        self.fetch_result = fetch_result
        self.decode = decode
        self.poll_interval = poll_interval
        self.max_attempts = max_attempts
        self.sleep = sleep
        self.job: Optional[AsyncJob] = None

    def run(self) -> GenerationResult:
        self.job = self._submit()
        return self._poll(self.job)

    def _submit(self) -> AsyncJob:
        payload = self.submit()
        job_id = payload.get("id") if isinstance(payload, dict) else None
        if not job_id:
            raise ProtocolError("No generation ID returned from async endpoint")
        logger.info("Submitted async job %s", job_id)
        return AsyncJob(job_id=str(job_id))

    def _poll(self, job: AsyncJob) -> GenerationResult:
        while job.attempts < self.max_attempts:
            self.sleep(self.poll_interval)
            job.attempts += 1
            job.state = JobState.POLLING

            response = self.fetch_result(job.job_id)
            if response.status_code == PENDING_STATUS:
                logger.debug("Job %s still processing (attempt %s/%s)", job.job_id, job.attempts, self.max_attempts)
                continue

            if not response.ok:
                job.state = JobState.FAILED
                logger.warning("Job %s failed with HTTP %s", job.job_id, response.status_code)
                raise classify_http_error(response.status_code, response.text, context="Polling")

            result = self.decode(response)
            job.state = JobState.SUCCEEDED
            logger.info("Job %s finished after %s poll(s)", job.job_id, job.attempts)
            return result

        job.state = JobState.TIMED_OUT
        raise JobTimeoutError(job.job_id, job.attempts, job.attempts * self.poll_interval)
