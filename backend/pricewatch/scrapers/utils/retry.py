"""Retry policies with exponential backoff."""

import logging

from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log,
)
from playwright.async_api import Error as PlaywrightError


logger = logging.getLogger(__name__)


# Browser launch only. Page navigation is never retried: a second request
# to a source that just failed raises the chance of being blocked.
playwright_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=30),
    retry=retry_if_exception_type(PlaywrightError),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
