from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..domain.constants import AuthState
from ..domain.exceptions import InvalidStateTransition
from .extensions import Extension, ExtensionPipeline

logger = logging.getLogger(__name__)

_ALLOWED_TRANSITIONS = {
    AuthState.DISCONNECTED: {AuthState.CONNECTED},
    AuthState.CONNECTED: {AuthState.SIGNED_IN, AuthState.DISCONNECTED},
    AuthState.SIGNED_IN: {AuthState.DISCONNECTED},
}


@dataclass(slots=True)
class SessionLifecycle:
    """
    State shared by every strategy: the extension pipeline and the
    current authentication state.

    Strategies hold one of these instead of inheriting mutable fields.
    """
    extensions: ExtensionPipeline = field(default_factory=ExtensionPipeline)
    state: AuthState = AuthState.DISCONNECTED

    def extend(self, extension: Extension) -> None:
        self.extensions.extend(extension)

    @property
    def is_connected(self) -> bool:
        return self.state is not AuthState.DISCONNECTED

    @property
    def is_signed_in(self) -> bool:
        return self.state is AuthState.SIGNED_IN

    def require(self, *states: AuthState, operation: str) -> None:
        if self.state not in states:
            raise InvalidStateTransition(
                f"Cannot {operation} while {self.state.value}"
            )

    def transition(self, target: AuthState) -> None:
        if target is self.state:
            return
        if target not in _ALLOWED_TRANSITIONS[self.state]:
            raise InvalidStateTransition(
                f"Invalid transition: {self.state.value} -> {target.value}"
            )
        logger.debug("auth state %s -> %s", self.state.value, target.value)
        self.state = target
