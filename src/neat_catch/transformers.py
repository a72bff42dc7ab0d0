"""
Ready-made error transformers for the most common error shapes.

Each one fits the ErrorTransformer contract and can be passed straight to
neat_catch, create_neat_wrapper or neat_catch_all:

    from neat_catch import ErrorTransformers, neat_catch

    data, error = neat_catch(lambda: load(path), ErrorTransformers.to_string)
    data, error = await neat_catch(
        lambda: client.get(url), ErrorTransformers.http_error
    )
    data, error = neat_catch(
        lambda: parse(row), ErrorTransformers.with_context(row_id=42)
    )
"""

from __future__ import annotations

import time
import traceback
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any, Callable

import httpx

from neat_catch.config import get_settings


class ErrorTransformers:
    """Factory of common error-shape converters."""

    @staticmethod
    def to_string(error: Any) -> str:
        """
        Reduce any failure to its message.

        >>> ErrorTransformers.to_string(ValueError("bad input"))
        'bad input'
        >>> ErrorTransformers.to_string(123)
        '123'
        """
        if isinstance(error, BaseException):
            return str(error)
        if isinstance(error, str):
            return error
        message = _message_of(error)
        if isinstance(message, str):
            return message
        return str(error)

    @staticmethod
    def to_dict(error: Any) -> dict[str, Any]:
        """
        Structured view of a failure: message, name, stack and cause.

        `cause` is only present when the exception has an explicit __cause__.
        """
        if isinstance(error, BaseException):
            structured: dict[str, Any] = {
                "message": str(error),
                "stack": _format_stack(error),
                "name": type(error).__name__,
            }
            if error.__cause__ is not None:
                structured["cause"] = error.__cause__
            return structured

        if isinstance(error, Mapping) or (error is not None and hasattr(error, "__dict__")):
            structured = {"message": _message_of(error) or "Unknown error"}
            stack = _field_of(error, "stack")
            if isinstance(stack, str):
                structured["stack"] = stack
            name = _field_of(error, "name")
            if isinstance(name, str):
                structured["name"] = name
            if _has_field(error, "cause"):
                structured["cause"] = _field_of(error, "cause")
            return structured

        return {"message": str(error)}

    @staticmethod
    def with_timestamp(error: Any) -> dict[str, Any]:
        """Wrap the failure with the moment it was observed (epoch ms + ISO)."""
        now_ms = int(time.time() * 1000)
        return {
            "error": error,
            "timestamp": now_ms,
            "iso_string": datetime.fromtimestamp(now_ms / 1000, UTC).isoformat(),
        }

    @staticmethod
    def http_error(error: Any) -> dict[str, Any]:
        """
        Describe an HTTP failure, distinguishing status, network and timeout errors.

        Understands httpx exceptions and responses, builtin ConnectionError /
        TimeoutError, and any object exposing `status_code` or `status`.
        """
        if isinstance(error, httpx.HTTPStatusError):
            return _http_status_shape(error.response)
        if isinstance(error, httpx.Response):
            return _http_status_shape(error)
        if isinstance(error, httpx.TimeoutException):
            return _http_shape(str(error), is_network_error=True, is_timeout=True)
        if isinstance(error, httpx.TransportError):
            return _http_shape(str(error), is_network_error=True, is_timeout=False)
        if isinstance(error, TimeoutError):
            return _http_shape(str(error), is_network_error=True, is_timeout=True)
        if isinstance(error, ConnectionError):
            return _http_shape(str(error), is_network_error=True, is_timeout=False)
        if not isinstance(error, BaseException) and _status_of(error) is not None:
            status = int(_status_of(error))
            return {
                "message": f"HTTP error {status}",
                "status": status,
                "status_text": _optional_str(_field_of(error, "reason_phrase") or _field_of(error, "status_text")),
                "url": _optional_str(_field_of(error, "url")),
                "is_network_error": False,
                "is_timeout": status == 408,
            }
        return _http_shape(str(error), is_network_error=False, is_timeout=False)

    @staticmethod
    def with_context(**context: Any) -> Callable[[Any], dict[str, Any]]:
        """
        Build a transformer that attaches fixed context to every failure.

            >>> ErrorTransformers.with_context(user_id=7)("boom")
            {'user_id': 7, 'error': 'boom'}
        """

        def transformer(error: Any) -> dict[str, Any]:
            return {**context, "error": error}

        return transformer

    @staticmethod
    def to_simple_error(error: Any) -> dict[str, str]:
        """Keep only the message."""
        return {"message": str(error)}

    @staticmethod
    def for_logging(error: Any) -> dict[str, Any]:
        """
        to_dict() plus a timestamp and, when configured, the environment label
        (NEAT_CATCH_ENVIRONMENT).
        """
        record = ErrorTransformers.to_dict(error)
        record["timestamp"] = int(time.time() * 1000)
        environment = get_settings().environment
        if environment:
            record["environment"] = environment
        return record


def _has_field(error: Any, name: str) -> bool:
    if isinstance(error, Mapping):
        return name in error
    return hasattr(error, name)


def _field_of(error: Any, name: str) -> Any:
    if isinstance(error, Mapping):
        return error.get(name)
    return getattr(error, name, None)


def _message_of(error: Any) -> Any:
    return _field_of(error, "message") if error is not None else None


def _format_stack(error: BaseException) -> str:
    return "".join(traceback.format_exception(type(error), error, error.__traceback__))


def _status_of(error: Any) -> Any:
    status = _field_of(error, "status_code")
    if status is None:
        status = _field_of(error, "status")
    return status


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)


def _http_shape(message: str, *, is_network_error: bool, is_timeout: bool) -> dict[str, Any]:
    return {
        "message": message,
        "is_network_error": is_network_error,
        "is_timeout": is_timeout,
    }


def _http_status_shape(response: httpx.Response) -> dict[str, Any]:
    try:
        url: str | None = str(response.request.url)
    except RuntimeError:
        url = None
    return {
        "message": f"HTTP error {response.status_code}",
        "status": response.status_code,
        "status_text": response.reason_phrase,
        "url": url,
        "is_network_error": False,
        "is_timeout": response.status_code == 408,
    }
