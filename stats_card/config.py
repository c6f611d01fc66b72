"""Stats card configuration — loaded from environment variables."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent / ".env")

# Root of the repo
REPO_ROOT = Path(__file__).resolve().parent.parent

# Snapshot cache
CACHE_DIR = Path(os.environ.get("CACHE_DIR", str(REPO_ROOT / ".cache")))
CACHE_FILE_NAME = "stats-cache.json"
CACHE_TTL = int(os.environ.get("CACHE_TTL", "900"))  # seconds (15m)
CACHE_DURABLE = os.environ.get("CACHE_DURABLE", "1") not in ("0", "false", "no")

# Upstream (LeetCode GraphQL)
UPSTREAM_URL = os.environ.get("UPSTREAM_URL", "https://leetcode.com/graphql")
UPSTREAM_TIMEOUT = float(os.environ.get("UPSTREAM_TIMEOUT", "10"))
UPSTREAM_USER_AGENT = os.environ.get("UPSTREAM_USER_AGENT", "LeetCode-Stats-Card/1.0")

# HTTP caching headers for rendered cards
CDN_MAX_AGE = int(os.environ.get("CDN_MAX_AGE", "1800"))
STALE_WHILE_REVALIDATE = int(os.environ.get("STALE_WHILE_REVALIDATE", "3600"))

# Server
HOST = os.environ.get("HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", "8000"))
