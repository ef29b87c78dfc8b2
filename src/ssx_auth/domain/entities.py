from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Optional

# Wire (camelCase) key -> ClientSession attribute.
_WIRE_FIELDS = {
    "address": "address",
    "walletAddress": "wallet_address",
    "chainId": "chain_id",
    "sessionKey": "session_key",
    "siwe": "siwe",
    "signature": "signature",
    "ens": "ens",
    "lens": "lens",
}


@dataclass(frozen=True, slots=True)
class ClientSession:
    """
    Session established by the wallet strategy.

    Immutable: server fields, ENS and Lens data are attached by building a
    new instance.
    """
    address: str
    wallet_address: str
    chain_id: int
    session_key: str
    siwe: str
    signature: str

    ens: Optional[Mapping[str, Any]] = None
    lens: Optional[Any] = None

    # Server-returned fields this package does not interpret
    extra: Mapping[str, Any] = field(default_factory=dict)

    # --- wire conversion -------------------------------------------------

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = dict(self.extra)
        for wire_key, attr in _WIRE_FIELDS.items():
            value = getattr(self, attr)
            if value is not None:
                payload[wire_key] = value
        return payload

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ClientSession":
        known = {attr: payload.get(wire_key) for wire_key, attr in _WIRE_FIELDS.items()}
        extra = {k: v for k, v in payload.items() if k not in _WIRE_FIELDS}
        return cls(**known, extra=extra)

    def with_server_fields(self, fields: Mapping[str, Any]) -> "ClientSession":
        """Merge fields returned by the verifier; server values win on overlap."""
        if not fields:
            return self
        return ClientSession.from_payload({**self.to_payload(), **fields})

    def with_identity(
        self,
        *,
        ens: Optional[Mapping[str, Any]] = None,
        lens: Optional[Any] = None,
    ) -> "ClientSession":
        changes: dict[str, Any] = {}
        if ens:
            changes["ens"] = ens
        if lens:
            changes["lens"] = lens
        return replace(self, **changes) if changes else self
