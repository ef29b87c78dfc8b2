from __future__ import annotations

import inspect
import logging
from typing import Any, Mapping, Optional, Union

import httpx

from ...config.settings import ServerSettings
from ...domain.constants import DEFAULT_ROUTE_METHODS, ServerOperation
from ...domain.entities import ClientSession
from ...domain.exceptions import (
    ServerError,
    ServerLoginError,
    ServerLogoutError,
    ServerNonceError,
)
from ...domain.value_objects import EnsResolveOptions, RouteConfig

logger = logging.getLogger(__name__)

_ERRORS: dict[ServerOperation, type[ServerError]] = {
    ServerOperation.NONCE: ServerNonceError,
    ServerOperation.LOGIN: ServerLoginError,
    ServerOperation.LOGOUT: ServerLogoutError,
}


class RouteResolver:
    """
    Resolves the nonce/login/logout operations against the verifier server.

    - every route has a default path and method, both overridable
    - a route's `custom_operation` replaces the HTTP call and receives the
      same payload
    - without a server host, HTTP-backed operations resolve to None
    """

    def __init__(
        self,
        settings: Optional[ServerSettings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.s = settings or ServerSettings()
        self._owns_client = client is None
        self._client = client
        if self._client is None and self.s.host:
            # the client keeps cookies, so the session cookie set by login
            # is sent back on logout
            self._client = httpx.AsyncClient(
                base_url=self.s.host,
                verify=self.s.verify_ssl,
                timeout=self.s.timeout,
            )

    @property
    def has_server(self) -> bool:
        return self._client is not None

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------ #
    # generic resolution
    # ------------------------------------------------------------------ #

    def route_for(self, operation: ServerOperation) -> RouteConfig:
        return self.s.routes.get(operation)

    async def resolve(self, operation: ServerOperation, payload: Mapping[str, Any]) -> Any:
        route = self.route_for(operation)
        error_cls = _ERRORS[operation]

        try:
            if route.custom_operation is not None:
                result = route.custom_operation(payload)
                if inspect.isawaitable(result):
                    result = await result
                if operation is ServerOperation.LOGIN:
                    return self._login_fields(result)
                return result

            if self._client is None:
                return None

            response = await self._request(operation, route, payload)
            return self._decode(operation, response)
        except ServerError as exc:
            logger.error("%s operation failed: %s", operation.value, exc)
            raise
        except Exception as exc:
            logger.error("%s operation failed: %s", operation.value, exc)
            raise error_cls(f"Server {operation.value} failed: {exc}") from exc

    async def _request(
        self,
        operation: ServerOperation,
        route: RouteConfig,
        payload: Mapping[str, Any],
    ) -> httpx.Response:
        method = (route.method or DEFAULT_ROUTE_METHODS[operation]).upper()
        kwargs: dict[str, Any] = {"headers": dict(route.headers)}
        if method == "GET":
            kwargs["params"] = {k: v for k, v in payload.items() if v is not None}
        else:
            kwargs["json"] = dict(payload)

        logger.debug("%s %s (%s)", method, route.url, operation.value)
        response = await self._client.request(method, route.url, **kwargs)
        response.raise_for_status()
        return response

    @staticmethod
    def _decode(operation: ServerOperation, response: httpx.Response) -> Any:
        if operation is ServerOperation.NONCE:
            nonce = response.text.strip()
            if not nonce:
                raise ServerNonceError("Unable to retrieve nonce from server.")
            return nonce

        if operation is ServerOperation.LOGIN:
            if not response.content:
                return {}
            return RouteResolver._login_fields(response.json())

        return None

    @staticmethod
    def _login_fields(data: Any) -> Mapping[str, Any]:
        """Login results must be objects; None means "no extra fields"."""
        if data is None:
            return {}
        if not isinstance(data, Mapping):
            raise ServerLoginError(
                f"Expected a JSON object from login, got {type(data).__name__}"
            )
        return data

    # ------------------------------------------------------------------ #
    # operations
    # ------------------------------------------------------------------ #

    async def nonce(self, params: Mapping[str, Any]) -> Optional[str]:
        nonce = await self.resolve(ServerOperation.NONCE, params)
        return nonce or None

    async def login(
        self,
        session: ClientSession,
        *,
        dao_login: bool = False,
        resolve_ens: Union[bool, EnsResolveOptions] = False,
        resolve_lens: bool = False,
    ) -> Mapping[str, Any]:
        body = {
            "signature": session.signature,
            "siwe": session.siwe,
            "address": session.address,
            "walletAddress": session.wallet_address,
            "chainId": session.chain_id,
            "daoLogin": dao_login,
            "resolveEns": (
                resolve_ens.as_dict()
                if isinstance(resolve_ens, EnsResolveOptions)
                else resolve_ens
            ),
            "resolveLens": resolve_lens,
        }
        return await self.resolve(ServerOperation.LOGIN, body) or {}

    async def logout(self, session: ClientSession) -> None:
        await self.resolve(ServerOperation.LOGOUT, session.to_payload())
