from __future__ import annotations

from typing import Any, Mapping, Protocol, Sequence, runtime_checkable


@runtime_checkable
class WalletSigner(Protocol):
    """Signing capability exposed by a wallet for its current account."""

    async def get_address(self) -> str:
        ...

    async def get_chain_id(self) -> int:
        ...

    async def sign_message(self, message: str) -> str:
        ...


@runtime_checkable
class WalletProvider(Protocol):
    """
    Port for a connected wallet (EIP-1193 style).

    Implementations live outside this package: they wrap a browser
    extension bridge, a WalletConnect session, a local key, etc.
    """

    async def list_accounts(self) -> Sequence[str]:
        """Accounts the wallet has already authorized for this client."""
        ...

    async def send(self, method: str, params: Sequence[Any]) -> Any:
        """Send a raw JSON-RPC request, e.g. `wallet_requestPermissions`."""
        ...

    async def get_signer(self) -> WalletSigner:
        ...


class Signer(Protocol):
    """
    Uniform signing interface consumed by the strategies.

    `delegate` and `invoke` are reserved for capability-based
    authorization and may raise OperationNotImplemented.
    """

    def get_did(self) -> str:
        ...

    def get_key_id(self) -> str:
        ...

    async def get_address(self) -> str:
        ...

    async def get_chain_id(self) -> int:
        ...

    async def sign(self, message: str) -> str:
        ...

    async def delegate(self) -> Any:
        ...

    async def invoke(self) -> Any:
        ...


class SessionManager(Protocol):
    """One session being prepared by the session builder."""

    def jwk(self) -> str | None:
        """Session key, or None when the builder could not produce one."""
        ...

    def add_default_actions(self, namespace: str, actions: Sequence[str]) -> None:
        ...

    def add_targeted_actions(self, namespace: str, target: str, actions: Sequence[str]) -> None:
        ...

    def add_extra_fields(self, namespace: str, fields: Mapping[str, Any]) -> None:
        ...

    async def build(self, config: Mapping[str, Any]) -> str:
        """Return the canonical sign-in message for `config`."""
        ...


class SessionBuilder(Protocol):
    """
    Port for the external message-construction engine.

    `initialize` must complete before the first call to `new`.
    """

    async def initialize(self) -> None:
        ...

    def new(self) -> SessionManager:
        ...


class CredentialManager(Protocol):
    """Platform credential manager (navigator.credentials equivalent)."""

    async def create(self, public_key: Any, *, signal: Any | None = None) -> Any:
        ...

    async def get(
        self,
        public_key: Any,
        *,
        mediation: str | None = None,
        signal: Any | None = None,
    ) -> Any:
        ...


class EnsResolver(Protocol):
    async def __call__(
        self,
        provider: WalletProvider,
        address: str,
        options: Mapping[str, bool],
    ) -> Mapping[str, Any]:
        """Return `{"domain": ..., "avatarUrl": ...}` style ENS data."""
        ...


class LensResolver(Protocol):
    async def __call__(self, provider: WalletProvider, address: str, page_cursor: str) -> Any:
        ...
