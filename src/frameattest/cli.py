#!/usr/bin/env python3
"""
frameattest CLI - operate and debug the frame service.

Commands:
    serve         - Run the frame app under uvicorn
    check-config  - Verify required environment variables
    resolve       - Look up a fid and show its attest wallet
    validate      - Ask the hub to validate hex message bytes
    encode        - ABI-encode an attestation payload offline
"""

import argparse
import asyncio
import json
import sys
from typing import Optional

import httpx


def _output(data: dict, args: argparse.Namespace, human_fn=None):
    """Output data as JSON or pretty-printed."""
    if getattr(args, "json", False):
        print(json.dumps(data, indent=2, default=str))
    elif human_fn:
        human_fn(data)
    else:
        print(json.dumps(data, indent=2, default=str))


# ─── Commands ──────────────────────────────────────────────────────

def cmd_serve(args):
    """Run the app. Settings are checked before the server binds."""
    import uvicorn
    from frameattest.config import Settings

    Settings.from_env()
    uvicorn.run("frameattest.api:app", host=args.host, port=args.port, log_level="warning")
    return {"served": True}


def cmd_check_config(args):
    from frameattest.config import Settings

    settings = Settings.from_env()
    result = {
        "ok": True,
        "action": settings.action,
        "hub_url": settings.hub_url,
        "counter_store": "postgres" if settings.database_url else "memory",
        "confirmation_timeout": settings.confirmation_timeout,
    }

    def human(d):
        print("✅ Configuration complete")
        print(f"   Action:   {d['action']}")
        print(f"   Hub:      {d['hub_url']}")
        print(f"   Counter:  {d['counter_store']}")
        print(f"   Timeout:  {d['confirmation_timeout']:g}s")

    _output(result, args, human)
    return result


def cmd_resolve(args):
    from frameattest.config import Settings
    from frameattest.identity import IdentityResolver, attest_wallet

    settings = Settings.from_env()

    async def run():
        async with httpx.AsyncClient(timeout=settings.http_timeout) as http:
            resolver = IdentityResolver(settings.neynar_api_key, http,
                                        base_url=settings.neynar_api_url)
            return await resolver.resolve(args.fid)

    profile = asyncio.run(run())
    result = {
        "fid": profile.fid,
        "username": profile.username,
        "follower_count": profile.follower_count,
        "verified_addresses": list(profile.verified_addresses),
        "custody_address": profile.custody_address,
        "attest_wallet": attest_wallet(profile),
    }

    def human(d):
        print(f"fid {d['fid']} ({d['username'] or 'unknown'})")
        print(f"   Followers: {d['follower_count']}")
        print(f"   Wallet:    {d['attest_wallet']}")

    _output(result, args, human)
    return result


def cmd_validate(args):
    from frameattest.config import Settings
    from frameattest.hub import HubClient, MessageValidator

    settings = Settings.from_env()

    async def run():
        async with httpx.AsyncClient(timeout=settings.http_timeout) as http:
            return await MessageValidator(HubClient(settings.hub_url, http)).validate(args.message)

    outcome = asyncio.run(run())
    result = {"valid": outcome.valid, "reason": outcome.reason}
    if outcome.valid:
        result.update({
            "fid": outcome.message.fid,
            "cast_hash": "0x" + outcome.message.cast_hash.hex(),
            "button_index": outcome.message.button_index,
        })

    def human(d):
        if d["valid"]:
            print(f"✅ Valid message from fid {d['fid']} on cast {d['cast_hash']}")
        else:
            print(f"❌ Invalid: {d['reason']}")

    _output(result, args, human)
    return result


def cmd_encode(args):
    from frameattest.attestation import SCHEMA, SCHEMA_UID, encode_attestation_data

    cast_hash = args.cast_hash[2:] if args.cast_hash.startswith("0x") else args.cast_hash
    data = encode_attestation_data(bytes.fromhex(cast_hash), args.fid)
    result = {"schema": SCHEMA, "schema_uid": SCHEMA_UID, "data": "0x" + data.hex()}
    _output(result, args, lambda d: print(d["data"]))
    return result


# ─── Parser ────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="frameattest",
        description="frameattest: Farcaster frame attestation service",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--json", action="store_true", help="Machine-readable JSON output")

    sub = parser.add_subparsers(dest="command", help="Available commands")

    p = sub.add_parser("serve", help="Run the frame app")
    p.add_argument("--host", default="0.0.0.0")
    p.add_argument("--port", type=int, default=8000)

    sub.add_parser("check-config", help="Verify required environment variables")

    p = sub.add_parser("resolve", help="Resolve a fid to its attest wallet")
    p.add_argument("fid", type=int, help="Farcaster id")

    p = sub.add_parser("validate", help="Validate hex message bytes with the hub")
    p.add_argument("message", help="Hex-encoded message bytes")

    p = sub.add_parser("encode", help="ABI-encode an attestation payload")
    p.add_argument("cast_hash", help="Cast hash (hex)")
    p.add_argument("fid", type=int, help="Farcaster id")

    return parser


def main(argv: Optional[list[str]] = None) -> Optional[dict]:
    """CLI entry point. Returns result dict for testing."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    commands = {
        "serve": cmd_serve,
        "check-config": cmd_check_config,
        "resolve": cmd_resolve,
        "validate": cmd_validate,
        "encode": cmd_encode,
    }

    try:
        return commands[args.command](args)
    except Exception as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
