# tests/conftest.py
import json
from typing import Any, Callable, Mapping, Sequence

import httpx
import pytest

from ssx_auth.adapters.server.route_resolver import RouteResolver
from ssx_auth.application.strategies.wallet import WalletStrategy
from ssx_auth.config.settings import ClientSettings, ServerSettings, Web3Settings

WALLET_ADDRESS = "0x71C7656EC7ab88b098defB751B7401B5f6d8976F"
SERVER_HOST = "https://verifier.test"


class FakeWalletSigner:
    def __init__(self, address: str = WALLET_ADDRESS, chain_id: int = 1) -> None:
        self.address = address
        self.chain_id = chain_id
        self.signed: list[str] = []

    async def get_address(self) -> str:
        return self.address

    async def get_chain_id(self) -> int:
        return self.chain_id

    async def sign_message(self, message: str) -> str:
        self.signed.append(message)
        return f"0xsig{len(self.signed)}"


class FakeProvider:
    def __init__(self, accounts: Sequence[str] = (WALLET_ADDRESS,), signer=None, fail_send: bool = False) -> None:
        self.accounts = list(accounts)
        self.signer = signer or FakeWalletSigner()
        self.fail_send = fail_send
        self.sent: list[tuple[str, Any]] = []

    async def list_accounts(self) -> Sequence[str]:
        return list(self.accounts)

    async def send(self, method: str, params: Sequence[Any]) -> Any:
        self.sent.append((method, params))
        if self.fail_send:
            raise RuntimeError("User rejected the request.")
        self.accounts = [self.signer.address]
        return [{"parentCapability": "eth_accounts"}]

    async def get_signer(self) -> FakeWalletSigner:
        return self.signer


class FakeSessionManager:
    def __init__(self, key: str | None = '{"kty":"OKP","crv":"Ed25519","x":"abc"}') -> None:
        self.key = key
        self.default_actions: list[tuple[str, list[str]]] = []
        self.targeted_actions: list[tuple[str, str, list[str]]] = []
        self.extra_fields: list[tuple[str, dict]] = []
        self.built: list[dict] = []

    def jwk(self) -> str | None:
        return self.key

    def add_default_actions(self, namespace: str, actions: Sequence[str]) -> None:
        self.default_actions.append((namespace, list(actions)))

    def add_targeted_actions(self, namespace: str, target: str, actions: Sequence[str]) -> None:
        self.targeted_actions.append((namespace, target, list(actions)))

    def add_extra_fields(self, namespace: str, fields: Mapping[str, Any]) -> None:
        self.extra_fields.append((namespace, dict(fields)))

    async def build(self, config: Mapping[str, Any]) -> str:
        self.built.append(dict(config))
        return json.dumps(dict(config), sort_keys=True)


class FakeSessionBuilder:
    def __init__(self, key: str | None = '{"kty":"OKP","crv":"Ed25519","x":"abc"}') -> None:
        self.key = key
        self.initialized = 0
        self.managers: list[FakeSessionManager] = []

    async def initialize(self) -> None:
        self.initialized += 1

    def new(self) -> FakeSessionManager:
        manager = FakeSessionManager(self.key)
        self.managers.append(manager)
        return manager


class ServerRecorder:
    """httpx.MockTransport handler emulating a verifier server."""

    def __init__(self, nonce: str = "abc123", login_response: dict | None = None, logout_status: int = 200) -> None:
        self.nonce = nonce
        self.login_response = login_response if login_response is not None else {"expiry": "2030-01-01"}
        self.logout_status = logout_status
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/ssx-nonce":
            return httpx.Response(200, text=self.nonce)
        if request.url.path == "/ssx-login":
            return httpx.Response(200, json=self.login_response)
        if request.url.path == "/ssx-logout":
            return httpx.Response(self.logout_status)
        return httpx.Response(404)

    def bodies(self, path: str) -> list[dict]:
        return [json.loads(r.content) for r in self.requests if r.url.path == path]

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def builder() -> FakeSessionBuilder:
    return FakeSessionBuilder()


@pytest.fixture
def server() -> ServerRecorder:
    return ServerRecorder()


@pytest.fixture
def make_resolver(server: ServerRecorder) -> Callable[..., RouteResolver]:
    def _make(settings: ServerSettings | None = None) -> RouteResolver:
        settings = settings or ServerSettings(host=SERVER_HOST)
        client = httpx.AsyncClient(base_url=SERVER_HOST, transport=httpx.MockTransport(server))
        return RouteResolver(settings, client=client)

    return _make


@pytest.fixture
def make_strategy(provider: FakeProvider, builder: FakeSessionBuilder, make_resolver) -> Callable[..., WalletStrategy]:
    def _make(
        *,
        with_server: bool = True,
        routes: RouteResolver | None = None,
        ens_resolver=None,
        lens_resolver=None,
        **web3: Any,
    ) -> WalletStrategy:
        settings = ClientSettings(web3=Web3Settings(**web3))
        if routes is None and with_server:
            routes = make_resolver()
        return WalletStrategy(
            driver=provider,
            builder=builder,
            settings=settings,
            routes=routes,
            ens_resolver=ens_resolver,
            lens_resolver=lens_resolver,
        )

    return _make
