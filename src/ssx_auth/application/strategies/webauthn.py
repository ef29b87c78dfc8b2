from __future__ import annotations

import logging
import secrets
from typing import Any, Optional, Sequence

from fido2.cose import ES256, ES384, ES512, EdDSA, RS256
from fido2.webauthn import (
    PublicKeyCredentialCreationOptions,
    PublicKeyCredentialDescriptor,
    PublicKeyCredentialParameters,
    PublicKeyCredentialRequestOptions,
    PublicKeyCredentialType,
    PublicKeyCredentialUserEntity,
)

from ...config.settings import ChallengeGenerator, WebAuthnSettings
from ...domain.exceptions import InvalidAlgorithmList, OperationNotImplemented
from ...domain.ports import CredentialManager

logger = logging.getLogger(__name__)

CHALLENGE_BYTES = 12  # 96 bits

# Preference order: ECDSA/SHA-256, EdDSA, ECDSA/SHA-384, ECDSA/SHA-512,
# RSASSA-PKCS1-v1_5/SHA-256 (COSE identifiers, RFC 9053).
DEFAULT_PUB_KEY_CRED_PARAMS: tuple[PublicKeyCredentialParameters, ...] = tuple(
    PublicKeyCredentialParameters(type=PublicKeyCredentialType.PUBLIC_KEY, alg=cose.ALGORITHM)
    for cose in (ES256, EdDSA, ES384, ES512, RS256)
)


class WebAuthnStrategy:
    """
    Platform credential strategy.

    Performs the WebAuthn creation (`register`) and assertion (`sign_in`)
    ceremonies through a CredentialManager. It does not produce a client
    session: the session accessors raise OperationNotImplemented, and there
    is no extension pipeline since no sign-in message is built.

    `sign_in` does not require a prior `register` on the same instance, so
    credentials created on another device can be used.
    """

    def __init__(self, settings: WebAuthnSettings, credentials: CredentialManager) -> None:
        self.s = settings
        self._credentials = credentials
        self._credential: Any = None

    # ------------------------------------------------------------------ #
    # credential state
    # ------------------------------------------------------------------ #

    def has_credential(self) -> bool:
        return self._credential is not None

    def get_credential(self) -> Any:
        return self._credential

    # ------------------------------------------------------------------ #
    # options
    # ------------------------------------------------------------------ #

    @staticmethod
    def generate_challenge(custom: Optional[ChallengeGenerator] = None) -> bytes:
        challenge = custom() if custom is not None else None
        if challenge is None:
            challenge = secrets.token_bytes(CHALLENGE_BYTES)
        return challenge

    def pub_key_cred_params(self) -> Sequence[PublicKeyCredentialParameters]:
        configured = self.s.creation.pub_key_cred_params
        if configured is None:
            return list(DEFAULT_PUB_KEY_CRED_PARAMS)
        if len(configured) == 0:
            raise InvalidAlgorithmList("`pub_key_cred_params` must have at least one algorithm.")
        return list(configured)

    def creation_options(
        self,
        user_id: bytes,
        name: str,
        display_name: str,
    ) -> PublicKeyCredentialCreationOptions:
        creation = self.s.creation
        return PublicKeyCredentialCreationOptions(
            rp=creation.rp,
            user=PublicKeyCredentialUserEntity(id=user_id, name=name, display_name=display_name),
            challenge=self.generate_challenge(creation.generate_challenge),
            pub_key_cred_params=self.pub_key_cred_params(),
            timeout=creation.timeout,
            exclude_credentials=creation.exclude_credentials,
            authenticator_selection=creation.authenticator_selection,
            attestation=creation.attestation,
            extensions=creation.extensions,
        )

    def request_options(
        self,
        allow_credentials: Optional[Sequence[PublicKeyCredentialDescriptor]] = None,
    ) -> PublicKeyCredentialRequestOptions:
        request = self.s.request
        if allow_credentials is None:
            allow_credentials = request.allow_credentials
        return PublicKeyCredentialRequestOptions(
            challenge=self.generate_challenge(request.generate_challenge),
            timeout=request.timeout,
            rp_id=request.rp_id,
            allow_credentials=allow_credentials,
            user_verification=request.user_verification,
            extensions=request.extensions,
        )

    # ------------------------------------------------------------------ #
    # ceremonies
    # ------------------------------------------------------------------ #

    async def register(
        self,
        user_id: bytes,
        name: str,
        display_name: str,
        *,
        signal: Any = None,
    ) -> Any:
        options = self.creation_options(user_id, name, display_name)
        try:
            credential = await self._credentials.create(options, signal=signal)
        except Exception as exc:
            logger.error("Credential creation failed: %s", exc)
            raise
        self._credential = credential
        return credential

    async def sign_up(
        self,
        user_id: bytes,
        name: str,
        display_name: str,
        *,
        signal: Any = None,
    ) -> Any:
        return await self.register(user_id, name, display_name, signal=signal)

    async def sign_in(
        self,
        allow_credentials: Optional[Sequence[PublicKeyCredentialDescriptor]] = None,
        *,
        mediation: Optional[str] = None,
        signal: Any = None,
    ) -> Any:
        options = self.request_options(allow_credentials)
        try:
            credential = await self._credentials.get(options, mediation=mediation, signal=signal)
        except Exception as exc:
            logger.error("Credential assertion failed: %s", exc)
            raise
        self._credential = credential
        return credential

    # ------------------------------------------------------------------ #
    # session operations (not available for this strategy)
    # ------------------------------------------------------------------ #

    async def sign_out(self) -> None:
        raise OperationNotImplemented("WebAuthnStrategy.sign_out is not implemented")

    def get_signer(self) -> Any:
        raise OperationNotImplemented("WebAuthnStrategy.get_signer is not implemented")

    def get_session(self) -> Any:
        raise OperationNotImplemented("WebAuthnStrategy.get_session is not implemented")

    def get_client_session(self) -> Any:
        raise OperationNotImplemented("WebAuthnStrategy.get_client_session is not implemented")
