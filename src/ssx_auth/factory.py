from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

from .adapters.server.route_resolver import RouteResolver
from .application.strategies.wallet import ProviderFactory, WalletStrategy
from .application.strategies.webauthn import WebAuthnStrategy
from .config.settings import ClientSettings
from .domain.constants import AuthMethod
from .domain.exceptions import ConfigurationError
from .domain.ports import CredentialManager, EnsResolver, LensResolver, SessionBuilder

AuthStrategy = Union[WalletStrategy, WebAuthnStrategy]


@dataclass(slots=True)
class AuthClient:
    """
    Framework-agnostic facade over the configured strategies.

    Either strategy may be absent; asking for a missing one raises
    ConfigurationError.
    """

    wallet: Optional[WalletStrategy] = None
    webauthn: Optional[WebAuthnStrategy] = None
    routes: Optional[RouteResolver] = None

    def strategy(self, method: AuthMethod) -> AuthStrategy:
        if method is AuthMethod.WALLET:
            selected: Optional[AuthStrategy] = self.wallet
        else:
            selected = self.webauthn
        if selected is None:
            raise ConfigurationError(f"No {method.value} strategy configured")
        return selected

    async def close(self) -> None:
        if self.routes is not None:
            await self.routes.close()


def create_auth_client(
    *,
    settings: ClientSettings,
    driver: Any = None,
    builder: Optional[SessionBuilder] = None,
    credentials: Optional[CredentialManager] = None,
    provider_factory: Optional[ProviderFactory] = None,
    ens_resolver: Optional[EnsResolver] = None,
    lens_resolver: Optional[LensResolver] = None,
    routes: Optional[RouteResolver] = None,
) -> AuthClient:
    """
    High-level factory: settings + collaborators -> AuthClient.

    - a wallet strategy is built when both `driver` and `builder` are given
    - a WebAuthn strategy is built when `settings.webauthn` and
      `credentials` are given
    """
    routes = routes or RouteResolver(settings.server)

    wallet: Optional[WalletStrategy] = None
    if driver is not None and builder is not None:
        wallet = WalletStrategy(
            driver=driver,
            builder=builder,
            settings=settings,
            routes=routes,
            provider_factory=provider_factory,
            ens_resolver=ens_resolver,
            lens_resolver=lens_resolver,
        )

    webauthn: Optional[WebAuthnStrategy] = None
    if settings.webauthn is not None and credentials is not None:
        webauthn = WebAuthnStrategy(settings.webauthn, credentials)

    return AuthClient(wallet=wallet, webauthn=webauthn, routes=routes)
