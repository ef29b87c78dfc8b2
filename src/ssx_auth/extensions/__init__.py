from __future__ import annotations

from .delegation import DelegationRegistryExtension

__all__ = ["DelegationRegistryExtension"]
