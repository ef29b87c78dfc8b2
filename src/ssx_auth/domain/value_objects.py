# src/ssx_auth/domain/value_objects.py

from __future__ import annotations

import secrets
import string
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Iterable, Mapping, Union

from .constants import DEFAULT_ROUTE_PATHS, ServerOperation


# --- Server routes -------------------------------------------------------


CustomOperation = Callable[[Mapping[str, Any]], Union[Any, Awaitable[Any]]]


@dataclass(frozen=True, slots=True)
class RouteConfig:
    """
    Structured description of one server route.

    - url:              path (relative to the server host) or absolute URL
    - method:           HTTP method override
    - headers:          extra request headers
    - custom_operation: replaces the HTTP call entirely; it receives the
                        payload the HTTP call would have sent
    """
    url: str | None = None
    method: str | None = None
    headers: Mapping[str, str] = field(default_factory=dict)
    custom_operation: CustomOperation | None = None


Route = Union[str, RouteConfig]


@dataclass(frozen=True, slots=True)
class ServerRoutes:
    nonce: Route = DEFAULT_ROUTE_PATHS[ServerOperation.NONCE]
    login: Route = DEFAULT_ROUTE_PATHS[ServerOperation.LOGIN]
    logout: Route = DEFAULT_ROUTE_PATHS[ServerOperation.LOGOUT]

    def get(self, operation: ServerOperation) -> RouteConfig:
        """Return the route for `operation` as a RouteConfig with a url."""
        route = getattr(self, operation.value)
        default_url = DEFAULT_ROUTE_PATHS[operation]
        if isinstance(route, RouteConfig):
            if route.url:
                return route
            return RouteConfig(
                url=default_url,
                method=route.method,
                headers=route.headers,
                custom_operation=route.custom_operation,
            )
        return RouteConfig(url=route or default_url)


# --- Identity resolution -------------------------------------------------


@dataclass(frozen=True, slots=True)
class EnsResolveOptions:
    domain: bool = True
    avatar: bool = True

    def as_dict(self) -> dict[str, bool]:
        return {"domain": self.domain, "avatar": self.avatar}


@dataclass(frozen=True, slots=True)
class EnsConfig:
    """ENS resolution settings. `resolve_on_server` moves the lookup to the verifier."""
    resolve: EnsResolveOptions = field(default_factory=EnsResolveOptions)
    resolve_on_server: bool = False


# --- Extension contributions ---------------------------------------------


@dataclass(frozen=True, slots=True)
class ConfigOverrides:
    """Returned by an extension's `after_connect` hook."""
    siwe: Mapping[str, Any] = field(default_factory=dict)


def _append_unique(target: list[str], values: Iterable[str]) -> None:
    if isinstance(values, str):
        values = (values,)
    for value in values:
        if value not in target:
            target.append(value)


@dataclass(slots=True)
class Capabilities:
    """
    Scoped capabilities collected from extensions.

    Contributions are additive: extensions sharing a namespace accumulate
    actions and fields, and adding the same action twice is a no-op.
    """
    default_actions: dict[str, list[str]] = field(default_factory=dict)
    targeted_actions: dict[str, dict[str, list[str]]] = field(default_factory=dict)
    extra_fields: dict[str, dict[str, Any]] = field(default_factory=dict)

    def add_default_actions(self, namespace: str, actions: Iterable[str]) -> None:
        _append_unique(self.default_actions.setdefault(namespace, []), actions)

    def add_targeted_actions(self, namespace: str, target: str, actions: Iterable[str]) -> None:
        by_target = self.targeted_actions.setdefault(namespace, {})
        _append_unique(by_target.setdefault(target, []), actions)

    def add_extra_fields(self, namespace: str, fields: Mapping[str, Any]) -> None:
        self.extra_fields.setdefault(namespace, {}).update(fields)

    def is_empty(self) -> bool:
        return not (self.default_actions or self.targeted_actions or self.extra_fields)


# --- SIWE defaults -------------------------------------------------------


_NONCE_ALPHABET = string.ascii_letters + string.digits
# 17 alphanumerics carry at least 96 bits of entropy.
NONCE_LENGTH = 17


def generate_nonce(length: int = NONCE_LENGTH) -> str:
    return "".join(secrets.choice(_NONCE_ALPHABET) for _ in range(length))


def iso_timestamp(moment: datetime | None = None) -> str:
    """UTC ISO-8601 timestamp with millisecond precision, e.g. 2024-01-01T00:00:00.000Z."""
    moment = (moment or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
