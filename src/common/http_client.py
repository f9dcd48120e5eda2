"""Shared HTTP helpers used across registry and repository clients.

Encapsulates common request/timeout error handling so modules avoid
duplicating try/except blocks. Transport failures and HTTP errors surface as
RegistryError; no retry or response caching is performed.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from constants import Constants
from common.errors import RegistryError
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)


def _default_headers(headers: Optional[Dict[str, str]]) -> Dict[str, str]:
    merged = {"Accept": "application/json", "User-Agent": Constants.USER_AGENT}
    if headers:
        merged.update(headers)
    return merged


def safe_get(
    url: str,
    *,
    context: str,
    session: Optional[requests.Session] = None,
    headers: Optional[Dict[str, str]] = None,
    **kwargs: Any,
) -> requests.Response:
    """Perform a GET request with consistent error handling and DEBUG traces.

    Args:
        url: Target URL
        context: Human-readable source tag for logs (e.g., "packagist")
        session: Optional requests session (auth, adapters, connection reuse)
        headers: Extra request headers
        **kwargs: Passed through to ``get`` (e.g. params)

    Raises:
        RegistryError: on timeouts and connection errors
    """
    safe_target = safe_url(url)
    getter = session.get if session is not None else requests.get
    with Timer() as t:
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP request",
                extra=extra_context(
                    event="http_request",
                    component="http_client",
                    action="GET",
                    target=safe_target,
                    context=context
                )
            )
        try:
            res = getter(
                url,
                timeout=Constants.REQUEST_TIMEOUT,
                headers=_default_headers(headers),
                **kwargs
            )
        except requests.Timeout as exc:
            logger.error(
                "%s request timed out after %s seconds",
                context,
                Constants.REQUEST_TIMEOUT,
            )
            raise RegistryError(f"{context} request timed out") from exc
        except requests.RequestException as exc:  # includes ConnectionError
            logger.error("%s connection error: %s", context, exc)
            raise RegistryError(f"{context} connection error: {exc}") from exc

        if is_debug_enabled(logger):
            logger.debug(
                "HTTP response",
                extra=extra_context(
                    event="http_response",
                    component="http_client",
                    action="GET",
                    status_code=res.status_code,
                    duration_ms=t.duration_ms(),
                    target=safe_target,
                    context=context
                )
            )
        return res


def get_json(
    url: str,
    *,
    context: str,
    session: Optional[requests.Session] = None,
    headers: Optional[Dict[str, str]] = None,
    **kwargs: Any,
) -> Any:
    """GET ``url`` and decode its JSON body.

    Returns:
        The decoded JSON document

    Raises:
        RegistryError: transport failure, HTTP status >= 400 or invalid JSON
    """
    res = safe_get(url, context=context, session=session, headers=headers, **kwargs)
    if res.status_code >= 400:
        logger.warning(
            "HTTP error response",
            extra=extra_context(
                event="http_response",
                component="http_client",
                outcome="http_error",
                status_code=res.status_code,
                target=safe_url(url),
                context=context
            )
        )
        raise RegistryError(
            f"{context} responded with HTTP error '{res.status_code}: {res.reason}'",
            status_code=res.status_code,
        )
    try:
        return res.json()
    except ValueError as exc:
        logger.debug(
            "JSON decode error",
            extra=extra_context(
                event="parse",
                component="http_client",
                action="get_json",
                outcome="json_decode_error",
                status_code=res.status_code,
                target=safe_url(url)
            )
        )
        raise RegistryError(f"unable to parse {context} response: {exc}", res.status_code) from exc
