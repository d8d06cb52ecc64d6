# storefront/utils/retry.py
import logging

import redis
import requests
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_fixed,
)

from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def is_transient_http_error(exc: BaseException) -> bool:
    """Connection problems, timeouts and 5xx answers are worth another try, 4xx are not."""
    if isinstance(exc, requests.HTTPError):
        return exc.response is not None and exc.response.status_code >= 500
    return isinstance(exc, (requests.ConnectionError, requests.Timeout))


def http_retry():
    #tylko idempotentne GET-y (katalog), POST /orders nigdy
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.3, min=0.3, max=3),
        retry=retry_if_exception(is_transient_http_error),
        before_sleep=before_sleep_log(logger, logging.WARNING),
    )


def redis_retry():
    #odczyt stanu przy starcie sesji
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type(redis.RedisError),
        before_sleep=before_sleep_log(logger, logging.WARNING),
    )


def redis_write_retry():
    """
    Cart mirror writes: one quick second attempt, then give up.
    A later mutation rewrites the key anyway.
    """
    return retry(
        reraise=True,
        stop=stop_after_attempt(2),
        wait=wait_fixed(0.1),
        retry=retry_if_exception_type((redis.ConnectionError, redis.TimeoutError)),
    )
