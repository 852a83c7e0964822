"""Thin httpx client construction shared by the REST adapters."""

import logging
from typing import Optional

import httpx


def build_client(
    base_url: str,
    headers: dict[str, str],
    timeout: float,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    debug: bool = False,
    log: Optional[logging.Logger] = None,
) -> httpx.AsyncClient:
    """
    Create the long-lived client an adapter uses for every call.

    With ``debug`` on, each request and response is logged at DEBUG level.
    Authorization headers are never logged.
    """
    event_hooks: dict[str, list] = {"request": [], "response": []}
    if debug:
        log = log or logging.getLogger("paygate.http")

        async def log_request(request: httpx.Request) -> None:
            log.debug("Request %s %s", request.method, request.url)

        async def log_response(response: httpx.Response) -> None:
            await response.aread()
            log.debug(
                "Response %s %s -> %d %s",
                response.request.method,
                response.request.url,
                response.status_code,
                response.text[:500],
            )

        event_hooks["request"].append(log_request)
        event_hooks["response"].append(log_response)

    return httpx.AsyncClient(
        base_url=base_url,
        headers=headers,
        timeout=httpx.Timeout(timeout),
        transport=transport,
        event_hooks=event_hooks,
    )
