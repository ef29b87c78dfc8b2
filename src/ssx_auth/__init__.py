"""
ssx_auth

Client-side session establishment for decentralized applications:
Sign-In with Ethereum through a wallet, or a WebAuthn platform credential,
with a pluggable extension pipeline in front of the signed message.
"""

__version__ = "0.1.0"

from .domain.constants import AuthMethod, AuthState, ServerOperation
from .domain.entities import ClientSession
from .domain.exceptions import (
    SSXAuthError,
    ProviderConnectionError,
    SessionBuilderError,
    SessionKeyUnavailable,
    ServerError,
    ServerNonceError,
    ServerLoginError,
    ServerLogoutError,
    InvalidAlgorithmList,
    OperationNotImplemented,
    InvalidStateTransition,
    ConfigurationError,
)
from .domain.value_objects import (
    Capabilities,
    ConfigOverrides,
    EnsConfig,
    EnsResolveOptions,
    RouteConfig,
    ServerRoutes,
)
from .domain.ports import (
    CredentialManager,
    SessionBuilder,
    SessionManager,
    Signer,
    WalletProvider,
    WalletSigner,
)

from .application.extensions import Extension, ExtensionPipeline
from .application.strategies.wallet import WalletStrategy
from .application.strategies.webauthn import WebAuthnStrategy

from .adapters.server.route_resolver import RouteResolver
from .adapters.wallet.signer import Web3Signer

from .config import ClientSettings, ServerSettings, Web3Settings, WebAuthnSettings, settings_from_env
from .factory import AuthClient, AuthStrategy, create_auth_client

__all__ = [
    "__version__",
    # domain core
    "AuthMethod",
    "AuthState",
    "ServerOperation",
    "ClientSession",
    "Capabilities",
    "ConfigOverrides",
    "EnsConfig",
    "EnsResolveOptions",
    "RouteConfig",
    "ServerRoutes",
    # ports
    "CredentialManager",
    "SessionBuilder",
    "SessionManager",
    "Signer",
    "WalletProvider",
    "WalletSigner",
    # exceptions
    "SSXAuthError",
    "ProviderConnectionError",
    "SessionBuilderError",
    "SessionKeyUnavailable",
    "ServerError",
    "ServerNonceError",
    "ServerLoginError",
    "ServerLogoutError",
    "InvalidAlgorithmList",
    "OperationNotImplemented",
    "InvalidStateTransition",
    "ConfigurationError",
    # strategies
    "Extension",
    "ExtensionPipeline",
    "WalletStrategy",
    "WebAuthnStrategy",
    "AuthClient",
    "AuthStrategy",
    "create_auth_client",
    # adapters
    "RouteResolver",
    "Web3Signer",
    # config
    "ClientSettings",
    "ServerSettings",
    "Web3Settings",
    "WebAuthnSettings",
    "settings_from_env",
]
