#!/usr/bin/env python3
"""Ask a running server to draft an event from a one-line idea.

Usage:
    # Against a local server:
    uv run python scripts/suggest_event.py --url http://localhost:8080 \\
        "A rooftop jazz night with local bands"

    # With a reference image, saving the generated poster:
    uv run python scripts/suggest_event.py --url http://localhost:8080 \\
        --image flyer.jpg --out poster.png "Autumn book fair for families"

The script polls /health/ready first (up to --timeout seconds), then reads
the city and category lists from the catalog API and goes through the same
retry policy as the web assistant (3 attempts, 25s per attempt).
"""

from __future__ import annotations

import argparse
import asyncio
import mimetypes
import sys
import time
from pathlib import Path

import httpx

from eventara.client.assistant import EventAssistantClient
from eventara.client.errors import AssistantError, InvalidImageError
from eventara.client.session import AssistantSession
from eventara.pipeline.encoding import decode_base64
from eventara.schemas import Category, City, Locale


async def wait_for_server(
    client: httpx.AsyncClient, *, timeout_s: int = 60, poll_interval_s: int = 2
) -> bool:
    """Poll /health/ready until it returns 200 or timeout expires."""
    print(f"⏳ Waiting for server to become ready (timeout: {timeout_s}s)...")
    start = time.perf_counter()
    while time.perf_counter() - start < timeout_s:
        try:
            resp = await client.get("/health/ready", timeout=5)
            if resp.status_code == 200:
                print(f"✅ Server ready in {time.perf_counter() - start:.1f}s")
                return True
            print(f"   Not ready yet (status={resp.status_code}), retrying...")
        except httpx.RequestError as e:
            print(f"   Connection failed ({e}), retrying...")
        await asyncio.sleep(poll_interval_s)

    print("❌ Server did not become ready within timeout.")
    return False


async def load_catalog(client: httpx.AsyncClient) -> tuple[list[City], list[Category]]:
    cities = (await client.get("/api/cities")).raise_for_status().json()
    categories = (await client.get("/api/categories")).raise_for_status().json()
    return (
        [City.model_validate(c) for c in cities],
        [Category.model_validate(c) for c in categories],
    )


async def run(args: argparse.Namespace) -> int:
    async with httpx.AsyncClient(base_url=args.url, timeout=30) as http:
        if not await wait_for_server(http, timeout_s=args.timeout):
            return 1
        cities, categories = await load_catalog(http)

    async with EventAssistantClient(args.url) as assistant:
        session = AssistantSession(assistant, cities, categories)

        if args.image:
            mime_type = mimetypes.guess_type(args.image.name)[0] or "application/octet-stream"
            try:
                session.attach_image(args.image.read_bytes(), mime_type)
            except InvalidImageError as e:
                print(f"❌ {e.message}")
                return 2

        print(f"\n🚀 Drafting: {args.idea!r}\n")
        start = time.perf_counter()
        try:
            result = await session.submit(args.idea)
        except AssistantError as e:
            print(f"❌ {e.message}")
            return 1
        if result is None:
            print(f"❌ {session.error}")
            return 1

        preview = session.preview(Locale(args.locale))
        if preview is None:
            print("❌ No suggestion to preview.")
            return 1
        print(f"✅ Suggestion ready in {time.perf_counter() - start:.1f}s\n")
        print(f"   Title:    {preview.title}")
        print(f"   City:     {preview.city_name} ({result.suggested_city_id})")
        print(f"   Category: {preview.category_name} ({result.suggested_category_id})")
        print(f"\n   {preview.description}\n")

        if args.out:
            args.out.write_bytes(decode_base64(result.generated_image_base64))
            print(f"🖼  Image written to {args.out}")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("idea", help="Free-text event idea")
    parser.add_argument("--url", required=True, help="Server base URL (e.g. http://localhost:8080)")
    parser.add_argument("--image", type=Path, help="Optional reference image")
    parser.add_argument("--out", type=Path, help="Write the generated image here")
    parser.add_argument(
        "--locale",
        choices=[loc.value for loc in Locale],
        default=Locale.en.value,
        help="Locale used for the printed preview (default: en)",
    )
    parser.add_argument(
        "--timeout",
        type=int,
        default=60,
        help="Max seconds to wait for server readiness (default: 60)",
    )
    sys.exit(asyncio.run(run(parser.parse_args())))


if __name__ == "__main__":
    main()
