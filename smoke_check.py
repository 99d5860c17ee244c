#!/usr/bin/env python3
"""
Smoke check for a running IPby server.

This script exercises every route against a live instance by:
1. Checking plain text and format-prefixed address responses
2. Checking the address-family guards (200 or 403)
3. Checking the X-Forwarded-For echo and the 404 fallback
"""

import asyncio
import sys

try:
    import httpx
except ImportError:
    print("❌ httpx not installed. Install with: pip install httpx")
    sys.exit(1)


BASE_URL = "http://localhost:3000"
COLORS = {
    "green": "\033[92m",
    "red": "\033[91m",
    "yellow": "\033[93m",
    "blue": "\033[94m",
    "reset": "\033[0m"
}

FORMATS = ["json", "jsonp", "xml", "yaml", "toml"]


def print_colored(message: str, color: str):
    """Print colored output."""
    print(f"{COLORS.get(color, '')}{message}{COLORS['reset']}")


async def check(client: httpx.AsyncClient, path: str, expected_status, headers=None) -> bool:
    """Request a path and report whether the status is one of the expected ones."""
    if isinstance(expected_status, int):
        expected_status = (expected_status,)

    response = await client.get(f"{BASE_URL}{path}", headers=headers)
    content_type = response.headers.get("Content-Type", "?")
    body = response.text.replace("\n", "\\n")

    if response.status_code in expected_status:
        print_colored(f"✓ {path} -> {response.status_code} [{content_type}] {body}", "green")
        return True
    print_colored(f"✗ {path} -> {response.status_code}, expected {expected_status}: {body}", "red")
    return False


async def check_text_routes(client: httpx.AsyncClient) -> list:
    """Plain text routes."""
    print_colored("\n🧪 Plain text routes", "blue")
    print_colored("=" * 60, "blue")
    return [
        await check(client, "/", 200),
        await check(client, "/ip", 200),
        await check(client, "/ipv4", (200, 403)),
        await check(client, "/ipv6", (200, 403)),
    ]


async def check_format_routes(client: httpx.AsyncClient) -> list:
    """Format-prefixed routes."""
    print_colored("\n🧪 Format routes", "blue")
    print_colored("=" * 60, "blue")
    results = []
    for fmt in FORMATS:
        results.append(await check(client, f"/{fmt}", 200))
        results.append(await check(client, f"/{fmt}/ip", 200))
        results.append(await check(client, f"/{fmt}/ipv4", (200, 403)))
        results.append(await check(client, f"/{fmt}/ipv6", (200, 403)))
    results.append(await check(client, "/jsonp/ip?callback=show", 200))
    return results


async def check_forwarding(client: httpx.AsyncClient) -> list:
    """X-Forwarded-For handling and the 404 fallback."""
    print_colored("\n🧪 Forwarding chain", "blue")
    print_colored("=" * 60, "blue")
    chain = {"X-Forwarded-For": "10.0.0.5, 203.0.113.7"}
    return [
        await check(client, "/xff", 200, headers=chain),
        await check(client, "/", 200, headers=chain),
        await check(client, "/json/ipv4", 403, headers={"X-Forwarded-For": "2001:db8::1"}),
        await check(client, "/ipv6/ipv4", 404, headers={"X-Forwarded-For": "2001:db8::1"}),
        await check(client, "/unknown/thing/extra", 404),
    ]


async def main():
    """Run all checks."""
    print_colored("\n" + "=" * 60, "blue")
    print_colored("🌐 IPby - Smoke Check", "blue")
    print_colored("=" * 60, "blue")

    # Check if API is running
    try:
        async with httpx.AsyncClient() as client:
            await client.get(f"{BASE_URL}/", timeout=2.0)
    except httpx.HTTPError:
        print_colored("\n❌ API is not running!", "red")
        print_colored("Start the API with: ipby --port 3000\n", "yellow")
        return 1

    async with httpx.AsyncClient() as client:
        results = []
        results += await check_text_routes(client)
        results += await check_format_routes(client)
        results += await check_forwarding(client)

    failed = results.count(False)
    print_colored("\n" + "=" * 60, "blue")
    if failed:
        print_colored(f"❌ {failed} of {len(results)} checks failed", "red")
    else:
        print_colored(f"✅ All {len(results)} checks passed!", "green")
    print_colored("=" * 60, "blue")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
