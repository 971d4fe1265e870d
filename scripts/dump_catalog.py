#!/usr/bin/env python3
"""Dump what the pystorefront client can read from a shop backend.

Prints the parsed model fields next to the raw record JSON so fields the
models do not map yet are easy to spot.

Usage
-----
Point the client at a backend and run::

    export POCKETBASE_URL="http://127.0.0.1:8090"
    python scripts/dump_catalog.py

Sign in to include the account sections::

    export STOREFRONT_EMAIL="you@example.com"
    export STOREFRONT_PASSWORD="your-password"
    python scripts/dump_catalog.py --account

Options::

    --limit N            Products per page to dump (default: 10)
    --account            Also dump wishlist, addresses and orders
    --json               Output as machine-readable JSON
    --output FILE        Write JSON to FILE instead of stdout
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pystorefront import StorefrontClient, StorefrontConfig, StorefrontError  # noqa: E402
from pystorefront.models._base import RecordModel  # noqa: E402


def _section(title: str) -> str:
    line = "=" * 60
    return f"\n{line}\n  {title}\n{line}"


def _dump_record(name: str, record: RecordModel, out: list[str]) -> dict[str, Any]:
    out.append(_section(name))
    parsed = record.model_dump(mode="json", exclude={"raw"})
    for key, value in parsed.items():
        out.append(f"  {key}: {value}")
    out.append(f"\n  -- {name} (raw JSON) --")
    out.append(json.dumps(record.raw, indent=2, default=str, ensure_ascii=False))
    return {"parsed": parsed, "raw": record.raw}


async def dump_catalog(client: StorefrontClient, *, limit: int, out: list[str]) -> dict[str, Any]:
    data: dict[str, Any] = {}

    try:
        categories = await client.get_categories()
        data["categories"] = [_dump_record(f"Category {c.slug or c.id}", c, out) for c in categories]
    except StorefrontError as exc:
        out.append(f"  !! categories failed: {exc}")
        data["categories"] = {"error": str(exc)}

    try:
        products = await client.get_products(per_page=limit)
        data["products"] = [_dump_record(f"Product {p.slug or p.id}", p, out) for p in products.items]
        data["products_total"] = products.total_items
    except StorefrontError as exc:
        out.append(f"  !! products failed: {exc}")
        data["products"] = {"error": str(exc)}

    try:
        data["settings"] = await client.get_settings()
        out.append(_section("SETTINGS"))
        out.extend(f"  {key}: {value}" for key, value in sorted(data["settings"].items()))
    except StorefrontError as exc:
        out.append(f"  !! settings failed: {exc}")
        data["settings"] = {"error": str(exc)}

    return data


async def dump_account(client: StorefrontClient, out: list[str]) -> dict[str, Any]:
    data: dict[str, Any] = {}
    user = client.current_user()
    if user is None:
        out.append("  !! not signed in, skipping account sections")
        return data
    data["user"] = _dump_record(f"User {user.email}", user, out)

    try:
        wishlist = await client.fetch_wishlist_products(user.id)
        data["wishlist"] = [p.id for p in wishlist]
        out.append(_section("WISHLIST"))
        out.extend(f"  - {p.id} {p.name}" for p in wishlist)
    except StorefrontError as exc:
        out.append(f"  !! wishlist failed: {exc}")

    try:
        addresses = await client.get_addresses()
        data["addresses"] = [_dump_record(f"Address {a.id}", a, out) for a in addresses]
    except StorefrontError as exc:
        out.append(f"  !! addresses failed: {exc}")

    try:
        orders = await client.get_user_orders()
        data["orders"] = [_dump_record(f"Order {o.order_number}", o, out) for o in orders.items]
    except StorefrontError as exc:
        out.append(f"  !! orders failed: {exc}")

    return data


async def main() -> None:
    parser = argparse.ArgumentParser(description="Dump catalog and account data for debugging / development.")
    parser.add_argument("--limit", type=int, default=10, help="Products per page to dump")
    parser.add_argument("--account", action="store_true", help="Sign in and dump account data")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")
    parser.add_argument("--output", "-o", help="Write JSON to FILE instead of stdout")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    config = StorefrontConfig.from_env()
    result: dict[str, Any] = {
        "timestamp": datetime.now(UTC).isoformat(),
        "base_url": config.base_url,
    }
    out: list[str] = [_section("pystorefront dump_catalog"), f"  backend   : {config.base_url}"]

    async with StorefrontClient(config) as client:
        report = await client.health_check()
        out.append(f"  health    : {report.status}")
        result["health"] = str(report.status)

        if args.account:
            email = os.environ.get("STOREFRONT_EMAIL", "")
            password = os.environ.get("STOREFRONT_PASSWORD", "")
            if not email or not password:
                parser.error("--account needs STOREFRONT_EMAIL and STOREFRONT_PASSWORD")
            await client.auth_with_password(email, password)

        result["catalog"] = await dump_catalog(client, limit=args.limit, out=out)
        if args.account:
            result["account"] = await dump_account(client, out)

    if not args.json_mode:
        print("\n".join(out))
        if not args.output:
            return
    payload = json.dumps(result, indent=2, default=str, ensure_ascii=False)
    if args.output:
        Path(args.output).write_text(payload, encoding="utf-8")
        print(f"JSON written to {args.output}", file=sys.stderr)
    else:
        print(payload)


if __name__ == "__main__":
    asyncio.run(main())
