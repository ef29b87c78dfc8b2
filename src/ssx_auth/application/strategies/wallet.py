from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional

from ...adapters.server.route_resolver import RouteResolver
from ...adapters.wallet.signer import Web3Signer
from ...config.settings import ClientSettings
from ...domain.constants import AuthState, DELEGATION_REGISTRY_NAMESPACE
from ...domain.entities import ClientSession
from ...domain.exceptions import (
    ConfigurationError,
    OperationNotImplemented,
    ProviderConnectionError,
    SessionBuilderError,
    SessionKeyUnavailable,
)
from ...domain.ports import (
    EnsResolver,
    LensResolver,
    SessionBuilder,
    SessionManager,
    WalletProvider,
)
from ...domain.value_objects import EnsResolveOptions, generate_nonce, iso_timestamp
from ...extensions.delegation import DelegationRegistryExtension
from ..enrichment import (
    EnrichmentPlan,
    enrich_session,
    server_ens_request,
    server_lens_request,
)
from ..extensions import Extension
from ..lifecycle import SessionLifecycle
from ..merging import deep_merge

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[Any], WalletProvider]


class WalletStrategy:
    """
    Sign-In with Ethereum strategy.

    disconnected --connect()--> connected --sign_in()--> signed-in
    signed-in --sign_out()--> disconnected

    A single instance must not run overlapping `sign_in` calls: they race
    on the cached session and the last one to finish wins.
    """

    def __init__(
        self,
        *,
        driver: Any,
        builder: SessionBuilder,
        settings: Optional[ClientSettings] = None,
        routes: Optional[RouteResolver] = None,
        provider_factory: Optional[ProviderFactory] = None,
        ens_resolver: Optional[EnsResolver] = None,
        lens_resolver: Optional[LensResolver] = None,
    ) -> None:
        self.s = settings or ClientSettings()
        self._driver = driver
        self._builder = builder
        self._routes = routes or RouteResolver(self.s.server)
        self._provider_factory = provider_factory
        self._ens_resolver = ens_resolver
        self._lens_resolver = lens_resolver

        self._lifecycle = SessionLifecycle()
        self._builder_ready = False
        self._provider: Optional[WalletProvider] = None
        self._manager: Optional[SessionManager] = None
        self._signer: Optional[Web3Signer] = None
        self._siwe_overrides: Mapping[str, Any] = {}
        self._session: Optional[ClientSession] = None

        if self.s.web3.enable_dao_login:
            self.extend(DelegationRegistryExtension())

    # ------------------------------------------------------------------ #
    # extensions
    # ------------------------------------------------------------------ #

    def extend(self, extension: Extension) -> None:
        self._lifecycle.extend(extension)

    def is_extension_enabled(self, namespace: str) -> bool:
        return self._lifecycle.extensions.is_enabled(namespace)

    # ------------------------------------------------------------------ #
    # connect
    # ------------------------------------------------------------------ #

    @property
    def state(self) -> AuthState:
        return self._lifecycle.state

    def is_connected(self) -> bool:
        return self._lifecycle.is_connected

    async def connect(self) -> None:
        if self.is_connected():
            return

        provider = self._resolve_provider()
        if not self.s.web3.skip_permission_request:
            await self._ensure_account_permission(provider)
        manager = await self._new_session_manager()

        self._provider = provider
        self._manager = manager

        # each connect starts from a clean slate so nothing leaks between cycles
        self._siwe_overrides = {}
        async for overrides in self._lifecycle.extensions.fold_after_connect(self):
            self._siwe_overrides = overrides

        capabilities = await self._lifecycle.extensions.collect_capabilities()
        for namespace, actions in capabilities.default_actions.items():
            manager.add_default_actions(namespace, list(actions))
        for namespace, by_target in capabilities.targeted_actions.items():
            for target, actions in by_target.items():
                manager.add_targeted_actions(namespace, target, list(actions))
        for namespace, fields in capabilities.extra_fields.items():
            manager.add_extra_fields(namespace, dict(fields))

        self._lifecycle.transition(AuthState.CONNECTED)

    def _resolve_provider(self) -> WalletProvider:
        if isinstance(self._driver, WalletProvider):
            return self._driver
        if self._provider_factory is None:
            raise ProviderConnectionError(
                "Wallet driver is not a WalletProvider and no provider_factory was given"
            )
        try:
            return self._provider_factory(self._driver)
        except Exception as exc:
            logger.error("Unable to create wallet provider: %s", exc)
            raise ProviderConnectionError(f"Unable to create wallet provider: {exc}") from exc

    @staticmethod
    async def _ensure_account_permission(provider: WalletProvider) -> None:
        try:
            accounts = await provider.list_accounts()
            if not accounts:
                await provider.send("wallet_requestPermissions", [{"eth_accounts": {}}])
        except Exception as exc:
            logger.error("Wallet permission request failed: %s", exc)
            raise ProviderConnectionError(f"Wallet permission request failed: {exc}") from exc

    async def _new_session_manager(self) -> SessionManager:
        try:
            if not self._builder_ready:
                await self._builder.initialize()
                self._builder_ready = True
            return self._builder.new()
        except Exception as exc:
            logger.error("Session builder initialization failed: %s", exc)
            raise SessionBuilderError(f"Session builder initialization failed: {exc}") from exc

    # ------------------------------------------------------------------ #
    # sign in / sign out
    # ------------------------------------------------------------------ #

    async def sign_in(self) -> ClientSession:
        self._lifecycle.require(
            AuthState.DISCONNECTED, AuthState.CONNECTED, operation="sign in"
        )
        await self.connect()

        session_key = self._manager.jwk()
        if session_key is None:
            logger.error("Session builder returned no session key")
            raise SessionKeyUnavailable("unable to retrieve session key")

        try:
            session = await self._authenticate(session_key)
            await self._lifecycle.extensions.after_sign_in(session)
        except Exception as exc:
            logger.error("Sign-in failed: %s", exc)
            raise

        self._session = session
        self._lifecycle.transition(AuthState.SIGNED_IN)

        plan = EnrichmentPlan.from_settings(self.s.web3)
        try:
            self._session = await enrich_session(
                session,
                plan,
                resolve_ens=self.resolve_ens,
                resolve_lens=self.resolve_lens,
            )
        except Exception as exc:
            logger.error("Identity resolution failed for %s: %s", session.address, exc)
            raise

        return self._session

    async def _authenticate(self, session_key: str) -> ClientSession:
        """Nonce -> build -> sign -> login. Returns the server-confirmed session."""
        self._signer = await Web3Signer.from_wallet_signer(await self._provider.get_signer())
        wallet_address = await self._signer.get_address()

        defaults: dict[str, Any] = {
            "address": wallet_address,
            "walletAddress": wallet_address,
            "chainId": await self._signer.get_chain_id(),
            "domain": self.s.web3.domain,
            "issuedAt": iso_timestamp(),
            "nonce": generate_nonce(),
        }

        server_nonce = await self._routes.nonce(defaults)
        if server_nonce:
            defaults = {**defaults, "nonce": server_nonce}

        siwe_config = deep_merge(deep_merge(defaults, self._siwe_overrides), self.s.web3.siwe_config)
        siwe = await self._manager.build(siwe_config)
        signature = await self._signer.sign(siwe)

        session = ClientSession(
            address=siwe_config["address"],
            wallet_address=wallet_address,
            chain_id=siwe_config["chainId"],
            session_key=session_key,
            siwe=siwe,
            signature=signature,
        )

        response = await self._routes.login(
            session,
            dao_login=self.is_extension_enabled(DELEGATION_REGISTRY_NAMESPACE),
            resolve_ens=server_ens_request(self.s.web3),
            resolve_lens=server_lens_request(self.s.web3),
        )
        return session.with_server_fields(response)

    async def sign_out(self) -> None:
        self._lifecycle.require(AuthState.SIGNED_IN, operation="sign out")
        try:
            await self._routes.logout(self._session)
        except Exception as exc:
            logger.error("Server logout failed, clearing local session anyway: %s", exc)
            raise
        finally:
            self._session = None
            self._signer = None
            self._manager = None
            self._lifecycle.transition(AuthState.DISCONNECTED)

    async def sign_up(self) -> Any:
        raise OperationNotImplemented("WalletStrategy.sign_up is not implemented")

    async def close(self) -> None:
        """Release the route resolver's HTTP client (a no-op for an injected one)."""
        await self._routes.close()

    # ------------------------------------------------------------------ #
    # identity resolution
    # ------------------------------------------------------------------ #

    async def resolve_ens(
        self,
        address: str,
        options: EnsResolveOptions = EnsResolveOptions(),
    ) -> Mapping[str, Any]:
        if self._ens_resolver is None:
            raise ConfigurationError("ENS resolution requested but no ens_resolver configured")
        return await self._ens_resolver(self._provider, address, options.as_dict())

    async def resolve_lens(self, address: str, page_cursor: str = "{}") -> Any:
        """Lens profiles owned by `address`; `page_cursor` defaults to the first page."""
        if self._lens_resolver is None:
            raise ConfigurationError("Lens resolution requested but no lens_resolver configured")
        return await self._lens_resolver(self._provider, address, page_cursor)

    # ------------------------------------------------------------------ #
    # accessors
    # ------------------------------------------------------------------ #

    async def wallet_address(self) -> str:
        """Address of the wallet's current account (requires a connection)."""
        signer = await self.get_provider().get_signer()
        return await signer.get_address()

    async def wallet_chain_id(self) -> int:
        signer = await self.get_provider().get_signer()
        return await signer.get_chain_id()

    def address(self) -> Optional[str]:
        return self._session.address if self._session else None

    def chain_id(self) -> Optional[int]:
        return self._session.chain_id if self._session else None

    def get_provider(self) -> WalletProvider:
        if self._provider is None:
            raise ConfigurationError("Wallet is not connected")
        return self._provider

    def get_signer(self) -> Optional[Web3Signer]:
        return self._signer

    def get_client_session(self) -> Optional[ClientSession]:
        return self._session

    def get_session(self) -> Any:
        raise OperationNotImplemented("WalletStrategy.get_session is not implemented")

    def get_config(self) -> ClientSettings:
        return self.s

    @property
    def siwe_overrides(self) -> Mapping[str, Any]:
        """SIWE overrides recorded by the extensions' after_connect hooks."""
        return self._siwe_overrides
