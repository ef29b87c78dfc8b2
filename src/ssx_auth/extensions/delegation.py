from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Awaitable, Callable, Optional, Sequence

from ..application.extensions import Extension
from ..domain.constants import DELEGATION_REGISTRY_NAMESPACE
from ..domain.value_objects import ConfigOverrides

if TYPE_CHECKING:
    from ..application.strategies.wallet import WalletStrategy

logger = logging.getLogger(__name__)

DelegatorLookup = Callable[[str, int], Awaitable[Sequence[str]]]
DelegatorSelector = Callable[[Sequence[str]], Awaitable[Optional[str]]]


async def _sign_as_self(delegators: Sequence[str]) -> Optional[str]:
    return None


class DelegationRegistryExtension(Extension):
    """
    DAO login: sign in on behalf of an account that delegated to the wallet.

    `lookup_delegators(wallet_address, chain_id)` lists the accounts that
    delegated to the connected wallet (e.g. from an on-chain delegate
    registry); `select_delegator` picks the one to act for, or None to sign
    in as the wallet itself. The verifier is told to check the delegation
    through the `daoLogin` flag of the login request.
    """

    namespace = DELEGATION_REGISTRY_NAMESPACE

    def __init__(
        self,
        lookup_delegators: Optional[DelegatorLookup] = None,
        select_delegator: DelegatorSelector = _sign_as_self,
    ) -> None:
        self._lookup_delegators = lookup_delegators
        self._select_delegator = select_delegator

    async def after_connect(self, strategy: "WalletStrategy") -> Optional[ConfigOverrides]:
        if self._lookup_delegators is None:
            return None

        wallet_address = await strategy.wallet_address()
        chain_id = await strategy.wallet_chain_id()
        delegators = await self._lookup_delegators(wallet_address, chain_id)
        if not delegators:
            return None

        delegator = await self._select_delegator(delegators)
        if not delegator:
            return None

        logger.info("signing in as delegator %s for wallet %s", delegator, wallet_address)
        return ConfigOverrides(siwe={"address": delegator})
