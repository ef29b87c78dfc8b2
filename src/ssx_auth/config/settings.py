from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Literal, Mapping, Optional, Sequence, Union

from fido2.webauthn import (
    AttestationConveyancePreference,
    AuthenticatorSelectionCriteria,
    PublicKeyCredentialDescriptor,
    PublicKeyCredentialParameters,
    PublicKeyCredentialRpEntity,
    UserVerificationRequirement,
)

from ..domain.value_objects import EnsConfig, ServerRoutes

ChallengeGenerator = Callable[[], Optional[bytes]]


@dataclass(slots=True)
class ServerSettings:
    """
    Verifier server connection settings.

    Without a `host`, HTTP-backed operations are skipped: the client nonce
    is used and login/logout are not sent (custom operations still run).
    """
    host: Optional[str] = None
    routes: ServerRoutes = field(default_factory=ServerRoutes)
    verify_ssl: bool = True
    timeout: float = 30.0


@dataclass(slots=True)
class Web3Settings:
    # Caller overrides for the SIWE message; they win over everything else
    siwe_config: Mapping[str, Any] = field(default_factory=dict)

    enable_dao_login: bool = False

    # bridge drivers (e.g. WalletConnect) authorize accounts while pairing
    # and reject the account-permission handshake
    skip_permission_request: bool = False

    # True resolves on the client; EnsConfig(resolve_on_server=True) on the server
    resolve_ens: Union[bool, EnsConfig] = False
    # True resolves on the client; "onServer" on the server
    resolve_lens: Union[bool, Literal["onServer"]] = False

    domain: str = "localhost"


@dataclass(slots=True)
class CreationSettings:
    rp: PublicKeyCredentialRpEntity
    generate_challenge: Optional[ChallengeGenerator] = None
    # None selects the default algorithm list; an empty list is an error
    pub_key_cred_params: Optional[Sequence[PublicKeyCredentialParameters]] = None
    timeout: Optional[int] = None
    exclude_credentials: Optional[Sequence[PublicKeyCredentialDescriptor]] = None
    authenticator_selection: Optional[AuthenticatorSelectionCriteria] = None
    attestation: Optional[AttestationConveyancePreference] = None
    extensions: Optional[Mapping[str, Any]] = None


@dataclass(slots=True)
class RequestSettings:
    generate_challenge: Optional[ChallengeGenerator] = None
    timeout: Optional[int] = None
    rp_id: Optional[str] = None
    allow_credentials: Optional[Sequence[PublicKeyCredentialDescriptor]] = None
    user_verification: Optional[UserVerificationRequirement] = None
    extensions: Optional[Mapping[str, Any]] = None


@dataclass(slots=True)
class WebAuthnSettings:
    creation: CreationSettings
    request: RequestSettings = field(default_factory=RequestSettings)


@dataclass(slots=True)
class ClientSettings:
    """
    Top-level client settings.

    Host code decides how to construct this (env, config file, etc.).
    """
    server: ServerSettings = field(default_factory=ServerSettings)
    web3: Web3Settings = field(default_factory=Web3Settings)
    webauthn: Optional[WebAuthnSettings] = None
