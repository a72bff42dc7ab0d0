"""
neat_catch — exceptions and failed awaitables as values, without try/except.

Every operation returns a two-slot Outcome, `(data, None)` on success and
`(None, error)` on failure, for sync and async code alike.

    from neat_catch import neat_catch, neat_catch_retry, RetryOptions

    data, error = neat_catch(lambda: json.loads(raw))
    if error is not None:
        ...

    data, error = await neat_catch_retry(
        lambda: client.get(url),
        RetryOptions(max_retries=2, delay=250),
    )
"""

import logging

from neat_catch.assertions import OutcomeAssertions
from neat_catch.catch import is_awaitable, neat_catch, neat_catch_async
from neat_catch.collect import BatchOutcome, neat_catch_all
from neat_catch.config import NeatCatchSettings, RetryDefaults, get_settings
from neat_catch.errors import FailureKind, TransformError, UnexpectedRetryExit
from neat_catch.log_config import configure_structlog
from neat_catch.outcome import Failure, NeatCatchResult, Outcome, Success
from neat_catch.retry import Backoff, RetryOptions, compute_delay, neat_catch_retry
from neat_catch.transform import ErrorTransformer, RetryErrorTransformer, transform_error
from neat_catch.transformers import ErrorTransformers
from neat_catch.wrapper import create_neat_wrapper

# Silent unless the application configures logging.
logging.getLogger("neat_catch").addHandler(logging.NullHandler())

catch = neat_catch

__all__ = [
    "neat_catch",
    "neat_catch_async",
    "catch",
    "is_awaitable",
    "create_neat_wrapper",
    "neat_catch_all",
    "neat_catch_retry",
    "Outcome",
    "Success",
    "Failure",
    "NeatCatchResult",
    "BatchOutcome",
    "RetryOptions",
    "Backoff",
    "compute_delay",
    "ErrorTransformer",
    "RetryErrorTransformer",
    "transform_error",
    "TransformError",
    "UnexpectedRetryExit",
    "FailureKind",
    "ErrorTransformers",
    "OutcomeAssertions",
    "NeatCatchSettings",
    "RetryDefaults",
    "get_settings",
    "configure_structlog",
]

__version__ = "1.0.0"
