"""Guest identity constants."""

from __future__ import annotations

ANON_COOKIE_NAME = "zento_anon"
ANON_SESSION_TTL_DAYS = 180

# 32 random bytes -> 256 bits of entropy per bearer token.
TOKEN_BYTES = 32

# Merge outcomes
MERGE_STATUS_MERGED = "merged"
MERGE_STATUS_NOOP = "noop"
MERGE_STATUS_SKIPPED = "skipped"
MERGE_STATUS_FAILED = "failed"
MERGE_STATUS_DISCARDED = "discarded"

__all__ = [
    "ANON_COOKIE_NAME",
    "ANON_SESSION_TTL_DAYS",
    "TOKEN_BYTES",
    "MERGE_STATUS_MERGED",
    "MERGE_STATUS_NOOP",
    "MERGE_STATUS_SKIPPED",
    "MERGE_STATUS_FAILED",
    "MERGE_STATUS_DISCARDED",
]
