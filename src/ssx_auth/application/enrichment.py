from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from ..config.settings import Web3Settings
from ..domain.entities import ClientSession
from ..domain.value_objects import EnsConfig, EnsResolveOptions

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class EnrichmentPlan:
    """Which identity lookups run on the client after sign-in."""
    ens_options: Optional[EnsResolveOptions] = None
    resolve_lens: bool = False

    @property
    def is_empty(self) -> bool:
        return self.ens_options is None and not self.resolve_lens

    @classmethod
    def from_settings(cls, web3: Web3Settings) -> "EnrichmentPlan":
        ens_options: Optional[EnsResolveOptions] = None
        if web3.resolve_ens is True:
            ens_options = EnsResolveOptions()
        elif isinstance(web3.resolve_ens, EnsConfig) and not web3.resolve_ens.resolve_on_server:
            ens_options = web3.resolve_ens.resolve

        return cls(ens_options=ens_options, resolve_lens=web3.resolve_lens is True)


def server_ens_request(web3: Web3Settings) -> EnsResolveOptions | bool:
    """Value of `resolveEns` in the login body."""
    if isinstance(web3.resolve_ens, EnsConfig) and web3.resolve_ens.resolve_on_server:
        return web3.resolve_ens.resolve
    return False


def server_lens_request(web3: Web3Settings) -> bool:
    """Value of `resolveLens` in the login body."""
    return web3.resolve_lens == "onServer"


async def enrich_session(
    session: ClientSession,
    plan: EnrichmentPlan,
    *,
    resolve_ens: Callable[[str, EnsResolveOptions], Awaitable[Any]],
    resolve_lens: Callable[[str], Awaitable[Any]],
) -> ClientSession:
    """
    Run the planned lookups concurrently and attach non-empty results.

    Results are matched to lookups by name, so a Lens-only plan can never
    land in the `ens` field.
    """
    if plan.is_empty:
        return session

    lookups: dict[str, Awaitable[Any]] = {}
    if plan.ens_options is not None:
        lookups["ens"] = resolve_ens(session.address, plan.ens_options)
    if plan.resolve_lens:
        lookups["lens"] = resolve_lens(session.address)

    logger.debug("resolving %s for %s", ", ".join(lookups), session.address)
    # every lookup settles before returning or raising
    results = await asyncio.gather(*lookups.values(), return_exceptions=True)
    resolved = dict(zip(lookups.keys(), results))
    for name, result in resolved.items():
        if isinstance(result, BaseException):
            logger.error("%s lookup failed for %s: %s", name, session.address, result)
            raise result

    return session.with_identity(ens=resolved.get("ens"), lens=resolved.get("lens"))
