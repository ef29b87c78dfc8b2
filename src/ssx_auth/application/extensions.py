from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, AsyncIterator, Iterator, Mapping, Sequence

from ..domain.entities import ClientSession
from ..domain.value_objects import Capabilities, ConfigOverrides
from .merging import shallow_merge

if TYPE_CHECKING:
    from .strategies.wallet import WalletStrategy

logger = logging.getLogger(__name__)


class Extension:
    """
    Base class for capability modules plugged into a strategy.

    Every hook is optional: returning None means "no contribution".
    Capability hooks only run for extensions with a `namespace`.
    """

    namespace: str | None = None

    async def default_actions(self) -> Sequence[str] | None:
        return None

    async def targeted_actions(self) -> Mapping[str, Sequence[str]] | None:
        return None

    async def extra_fields(self) -> Mapping[str, Any] | None:
        return None

    async def after_connect(self, strategy: "WalletStrategy") -> ConfigOverrides | None:
        """Runs once the wallet is connected; may override SIWE fields."""
        return None

    async def after_sign_in(self, session: ClientSession) -> None:
        """Runs after the server confirmed the session. Side effects only."""
        return None


class ExtensionPipeline:
    """
    Ordered collection of extensions.

    Each hook type runs for every extension before the next hook type
    starts: first all `after_connect` hooks, then all `default_actions`,
    then all `targeted_actions`, then all `extra_fields`.
    """

    def __init__(self) -> None:
        self._extensions: list[Extension] = []

    def extend(self, extension: Extension) -> None:
        self._extensions.append(extension)

    def __iter__(self) -> Iterator[Extension]:
        return iter(tuple(self._extensions))

    def __len__(self) -> int:
        return len(self._extensions)

    def is_enabled(self, namespace: str) -> bool:
        return any(e.namespace == namespace for e in self._extensions)

    # ------------------------------------------------------------------ #
    # connect phases
    # ------------------------------------------------------------------ #

    async def fold_after_connect(
        self,
        strategy: "WalletStrategy",
        base: Mapping[str, Any] | None = None,
    ) -> AsyncIterator[dict[str, Any]]:
        """
        Run `after_connect` hooks in registration order.

        Yields the cumulative SIWE overrides after each hook, so callers can
        record progress: when a hook raises, the steps already yielded stay
        applied. Later registrations win on identical keys.
        """
        current: dict[str, Any] = dict(base or {})
        for extension in self:
            overrides = await extension.after_connect(strategy)
            if overrides is not None:
                current = shallow_merge(current, overrides.siwe)
            yield current

    async def collect_capabilities(self) -> Capabilities:
        capabilities = Capabilities()
        scoped = [e for e in self if e.namespace]

        for extension in scoped:
            actions = await extension.default_actions()
            if actions:
                capabilities.add_default_actions(extension.namespace, actions)

        for extension in scoped:
            targeted = await extension.targeted_actions()
            for target, actions in (targeted or {}).items():
                capabilities.add_targeted_actions(extension.namespace, target, actions)

        for extension in scoped:
            fields = await extension.extra_fields()
            if fields:
                capabilities.add_extra_fields(extension.namespace, fields)

        return capabilities

    # ------------------------------------------------------------------ #
    # sign-in phase
    # ------------------------------------------------------------------ #

    async def after_sign_in(self, session: ClientSession) -> None:
        for extension in self:
            await extension.after_sign_in(session)
        logger.debug("after_sign_in hooks completed for %d extension(s)", len(self))
