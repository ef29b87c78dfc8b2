from __future__ import annotations

from typing import Any

from ...domain.exceptions import OperationNotImplemented
from ...domain.ports import Signer, WalletSigner


def pkh_did(address: str, chain_id: int) -> str:
    """did:pkh identifier for an EVM account."""
    return f"did:pkh:eip155:{chain_id}:{address}"


class Web3Signer(Signer):
    """
    Adapter implementing the Signer port on top of a wallet signer.

    Adapter layer:
    - Knows the DID / key id of the account it signs for.
    - Delegates message signing to the wallet.
    """

    def __init__(self, did: str, key_id: str, signer: WalletSigner) -> None:
        self._did = did
        self._key_id = key_id
        self._signer = signer

    @classmethod
    async def from_wallet_signer(cls, signer: WalletSigner) -> "Web3Signer":
        did = pkh_did(await signer.get_address(), await signer.get_chain_id())
        return cls(did, f"{did}#blockchainAccountId", signer)

    def get_did(self) -> str:
        return self._did

    def get_key_id(self) -> str:
        return self._key_id

    async def get_address(self) -> str:
        return await self._signer.get_address()

    async def get_chain_id(self) -> int:
        return await self._signer.get_chain_id()

    async def sign(self, message: str) -> str:
        return await self._signer.sign_message(message)

    async def delegate(self) -> Any:
        raise OperationNotImplemented("Web3Signer.delegate is not implemented")

    async def invoke(self) -> Any:
        raise OperationNotImplemented("Web3Signer.invoke is not implemented")
