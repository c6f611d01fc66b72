#!/usr/bin/env python3
"""LeetCode Stats Card — SVG card server.

Launch: python3 stats_card_server.py
Serves at http://0.0.0.0:8000 (or PORT env var)
"""

import uvicorn

from stats_card.config import CACHE_DIR, CACHE_DURABLE, CACHE_TTL, HOST, PORT, UPSTREAM_URL


def main():
    print("=" * 60)
    print("  LeetCode Stats Card")
    print("=" * 60)

    print(f"\n  Upstream:  {UPSTREAM_URL}")
    if CACHE_DURABLE:
        print(f"  Cache:     {CACHE_DIR} (TTL {CACHE_TTL}s, falls back to memory if unwritable)")
    else:
        print(f"  Cache:     in-memory only (TTL {CACHE_TTL}s)")

    url = f"http://{HOST}:{PORT}"
    print(f"\n  Card:      {url}/<username>?show=graph,recent")
    print(f"  API docs:  {url}/api/v1/docs")
    print("  Press Ctrl+C to stop\n")

    from stats_card.app import create_app
    app = create_app()
    uvicorn.run(app, host=HOST, port=PORT, log_level="info")


if __name__ == "__main__":
    main()
