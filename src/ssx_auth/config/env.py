from __future__ import annotations

import os
from typing import Any, Union

from ..domain.exceptions import ConfigurationError
from ..domain.value_objects import EnsConfig, ServerRoutes
from .settings import ClientSettings, ServerSettings, Web3Settings


def _bool(key: str, default: bool = False) -> bool:
    raw = os.getenv(key)
    if raw is None:
        return default
    return str(raw).strip().lower() in {"1", "true", "yes", "on"}


def _float(key: str, default: float) -> float:
    raw = os.getenv(key)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{key} must be a number, got {raw!r}") from exc


def _resolve_ens(raw: str | None) -> Union[bool, EnsConfig]:
    value = (raw or "").strip().lower()
    if value in {"server", "onserver"}:
        return EnsConfig(resolve_on_server=True)
    return value in {"1", "true", "yes", "on"}


def _resolve_lens(raw: str | None) -> Union[bool, str]:
    value = (raw or "").strip().lower()
    if value in {"server", "onserver"}:
        return "onServer"
    return value in {"1", "true", "yes", "on"}


def settings_from_env() -> ClientSettings:
    defaults = ServerRoutes()
    routes = ServerRoutes(
        nonce=os.getenv("SSX_NONCE_ROUTE") or defaults.nonce,
        login=os.getenv("SSX_LOGIN_ROUTE") or defaults.login,
        logout=os.getenv("SSX_LOGOUT_ROUTE") or defaults.logout,
    )

    server = ServerSettings(
        host=os.getenv("SSX_SERVER_HOST") or None,
        routes=routes,
        verify_ssl=_bool("SSX_VERIFY_SSL", True),
        timeout=_float("SSX_HTTP_TIMEOUT", 30.0),
    )

    siwe_config: dict[str, Any] = {}
    statement = os.getenv("SSX_SIWE_STATEMENT")
    if statement:
        siwe_config["statement"] = statement

    web3 = Web3Settings(
        siwe_config=siwe_config,
        enable_dao_login=_bool("SSX_ENABLE_DAO_LOGIN"),
        skip_permission_request=_bool("SSX_SKIP_PERMISSION_REQUEST"),
        resolve_ens=_resolve_ens(os.getenv("SSX_RESOLVE_ENS")),
        resolve_lens=_resolve_lens(os.getenv("SSX_RESOLVE_LENS")),
        domain=os.getenv("SSX_DOMAIN") or "localhost",
    )

    return ClientSettings(server=server, web3=web3)
