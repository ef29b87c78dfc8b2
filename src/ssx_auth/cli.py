# src/ssx_auth/cli.py

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any, Sequence

from .adapters.server.route_resolver import RouteResolver
from .config.env import settings_from_env
from .config.settings import ClientSettings
from .domain.constants import DEFAULT_ROUTE_METHODS, ServerOperation
from .domain.exceptions import SSXAuthError
from .domain.value_objects import EnsConfig, RouteConfig, generate_nonce, iso_timestamp


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="ssx-auth",
        description="Inspect ssx_auth settings and probe the verifier server",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser(
        "settings",
        help="Print the settings derived from SSX_* environment variables.",
    )

    nonce = commands.add_parser(
        "nonce",
        help="Request a nonce from the configured server (SSX_SERVER_HOST).",
    )
    nonce.add_argument("--address", required=True, help="Wallet address to send.")
    nonce.add_argument("--chain-id", type=int, default=1, help="Chain id (default: 1).")
    nonce.add_argument(
        "--host",
        help="Override the server host (defaults from env SSX_SERVER_HOST).",
    )

    return parser.parse_args(args=argv)


def _route_summary(operation: ServerOperation, route: RouteConfig) -> dict[str, Any]:
    return {
        "url": route.url,
        "method": (route.method or DEFAULT_ROUTE_METHODS[operation]).upper(),
        "custom": route.custom_operation is not None,
    }


def settings_summary(settings: ClientSettings) -> dict[str, Any]:
    routes = settings.server.routes
    resolve_ens = settings.web3.resolve_ens
    if isinstance(resolve_ens, EnsConfig):
        resolve_ens = {
            "resolve": resolve_ens.resolve.as_dict(),
            "resolveOnServer": resolve_ens.resolve_on_server,
        }
    return {
        "server": {
            "host": settings.server.host,
            "verifySsl": settings.server.verify_ssl,
            "timeout": settings.server.timeout,
            "routes": {op.value: _route_summary(op, routes.get(op)) for op in ServerOperation},
        },
        "web3": {
            "domain": settings.web3.domain,
            "enableDaoLogin": settings.web3.enable_dao_login,
            "skipPermissionRequest": settings.web3.skip_permission_request,
            "resolveEns": resolve_ens,
            "resolveLens": settings.web3.resolve_lens,
            "siweConfig": dict(settings.web3.siwe_config),
        },
    }


async def request_nonce(resolver: RouteResolver, address: str, chain_id: int, domain: str) -> str | None:
    params = {
        "address": address,
        "walletAddress": address,
        "chainId": chain_id,
        "domain": domain,
        "issuedAt": iso_timestamp(),
        "nonce": generate_nonce(),
    }
    try:
        return await resolver.nonce(params)
    finally:
        await resolver.close()


def _run(args: argparse.Namespace) -> dict[str, Any]:
    settings = settings_from_env()

    if args.command == "settings":
        return settings_summary(settings)

    if args.host:
        settings.server.host = args.host
    if not settings.server.host:
        raise SystemExit("No server configured: set SSX_SERVER_HOST or pass --host")

    resolver = RouteResolver(settings.server)
    nonce = asyncio.run(
        request_nonce(resolver, args.address, args.chain_id, settings.web3.domain)
    )
    return {"host": settings.server.host, "nonce": nonce}


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    try:
        result = _run(args)
    except SSXAuthError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    json.dump(result, sys.stdout, indent=2, sort_keys=True)
    print()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
