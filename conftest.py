"""Shared pytest setup for the stats card service."""

import os

# Keep tests off the real disk cache; set before any stats_card imports read config
os.environ.setdefault("CACHE_DURABLE", "0")
os.environ.setdefault("UPSTREAM_URL", "https://leetcode.test/graphql")
