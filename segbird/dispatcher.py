"""segbird/dispatcher.py
Signed event dispatch between services over plain HTTP.

1. **publish** – sign a payload and POST it once to
   `<service base URL><prefix>/<event>`.
2. **subscribe** – register `POST <prefix>/<event>` on a FastAPI app (or
   router); every request is verified, handed to the callback and answered
   with its return value, or with a 500 carrying the error message.

There is no broker and no retry: one publish is exactly one HTTP call.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Mapping
from typing import Any, Awaitable, Callable, Union

import httpx
from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from segbird.config import DispatcherConfig, ServiceRegistry, build_config, build_registry
from segbird.errors import (
    ConfigurationError,
    HandlerError,
    RemoteError,
    ServiceNotConfiguredError,
    ServiceUnavailableError,
    TokenVerificationError,
)
from segbird.tokens import bearer_token, sign_token, verify_token
from segbird.urls import check_event, route_path, url_join

log = logging.getLogger(__name__)

EventHandler = Callable[[dict[str, Any]], Union[Any, Awaitable[Any]]]


def init(
    services: Mapping[str, str] | None = None,
    server: Any = None,
    jwt_secret: str | None = None,
    jwt_ttl: int | str | None = None,
    api_prefix: str | None = None,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> Dispatcher:
    """Validate the settings once and return a ready Dispatcher.

    Raises ConfigurationError when a service host is not a string or the
    secret is missing.
    """
    log.debug("Initializing...")
    dispatcher = Dispatcher(
        services=build_registry(services),
        config=build_config(jwt_secret, jwt_ttl, api_prefix),
        server=server,
        http_client=http_client,
    )
    log.debug("Segbird is ready.")
    return dispatcher


class Dispatcher:
    """Holds the service registry, the signing config and the route server.

    Build it through `init()`; nothing here changes after construction.
    """

    def __init__(
        self,
        services: ServiceRegistry,
        config: DispatcherConfig,
        server: Any = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._services = services
        self._config = config
        self._server = server
        self._http_client = http_client

    @property
    def services(self) -> ServiceRegistry:
        return self._services

    @property
    def config(self) -> DispatcherConfig:
        return self._config

    @property
    def server(self) -> Any:
        return self._server

    # ────────────────────────────────────────────────────────────────
    #  Publishing
    # ────────────────────────────────────────────────────────────────
    def endpoint(self, event: str, service: str) -> str:
        """URL that `publish(event, service)` posts to."""
        base_url = self._services.get(service)
        if not base_url:
            raise ServiceNotConfiguredError(service)
        check_event(event)
        return url_join(base_url, self._config.path_prefix, event)

    async def publish(
        self,
        event: str,
        service: str,
        data: Mapping[str, Any] | None = None,
    ) -> str:
        """Send *data* to *service* as *event* and return the raw response body."""
        url = self.endpoint(event, service)
        token = sign_token(
            data if data is not None else {},
            self._config.signing_secret,
            self._config.token_ttl_seconds,
        )

        log.debug("Publishing %s to %s", event, url)
        try:
            response = await self._post(url, headers={"Authorization": token})
        except httpx.ConnectError as exc:
            log.warning("Service %s unreachable at %s: %s", service, url, exc)
            raise ServiceUnavailableError(service) from exc

        if response.status_code != 200:
            log.warning("Service %s answered %s for %s", service, response.status_code, event)
            raise RemoteError(response.status_code, response.text)
        return response.text

    async def _post(self, url: str, headers: dict[str, str]) -> httpx.Response:
        if self._http_client is not None:
            return await self._http_client.post(url, headers=headers)
        async with httpx.AsyncClient() as client:
            return await client.post(url, headers=headers)

    # ────────────────────────────────────────────────────────────────
    #  Subscribing
    # ────────────────────────────────────────────────────────────────
    def subscribe(self, event: str, handler: EventHandler) -> str:
        """Register `POST <prefix>/<event>` and return the route path."""
        if self._server is None:
            raise ConfigurationError("settings.server is empty. You must configure a server to subscribe.")
        check_event(event)
        path = route_path(self._config.path_prefix, event)

        async def receive(request: Request):
            try:
                payload = verify_token(
                    bearer_token(request.headers.get("authorization")),
                    self._config.signing_secret,
                )
                return _to_response(await _call(handler, payload))
            except TokenVerificationError as exc:
                log.warning("Rejected %s: %s", path, exc)
                return _error_response(exc)
            except HandlerError as exc:
                log.exception("Handler for %s failed", path)
                return _error_response(exc)

        self._server.add_api_route(path, receive, methods=["POST"], name=f"segbird:{event}")
        log.debug("Subscribed to %s", path)
        return path


async def _call(handler: EventHandler, payload: dict[str, Any]) -> Any:
    try:
        result = handler(payload)
        if inspect.isawaitable(result):
            result = await result
        return result
    except Exception as exc:
        raise HandlerError(str(exc) or type(exc).__name__) from exc


def _to_response(result: Any) -> Response:
    try:
        if isinstance(result, Response):
            return result
        if result is None:
            return Response(status_code=200)
        if isinstance(result, str):
            return PlainTextResponse(result)
        if isinstance(result, (bytes, bytearray)):
            return Response(content=bytes(result))
        return JSONResponse(jsonable_encoder(result))
    except Exception as exc:
        raise HandlerError(str(exc) or type(exc).__name__) from exc


def _error_response(exc: Exception) -> PlainTextResponse:
    return PlainTextResponse(str(exc) or type(exc).__name__, status_code=500)
