"""
ssx_auth.config

- ClientSettings and its parts: server connection, SIWE/web3 behaviour,
  WebAuthn ceremony options.
- settings_from_env: convenience loader for SSX_* environment variables.
"""

from __future__ import annotations

from .env import settings_from_env
from .settings import (
    ClientSettings,
    CreationSettings,
    RequestSettings,
    ServerSettings,
    Web3Settings,
    WebAuthnSettings,
)

__all__ = [
    "ClientSettings",
    "CreationSettings",
    "RequestSettings",
    "ServerSettings",
    "Web3Settings",
    "WebAuthnSettings",
    "settings_from_env",
]
