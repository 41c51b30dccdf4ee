# gatekeeper/flags/rollout.py
"""
Percentage rollout bucketing.

The bucket for a user is shared with services written in other languages,
so every detail below is part of the contract:

    digest  = sha256(utf8(f"{flag_name}:{user_id}"))
    bucket  = int(first 8 hex digits of digest, base 16) % 100
    enabled = bucket < percentage

Changing any constant reshuffles every user's rollout assignment.
"""

import hashlib
import random
from typing import Callable

ROLLOUT_DIGEST = "sha256"
ROLLOUT_PREFIX_HEX_CHARS = 8  # 32 bits
ROLLOUT_BUCKETS = 100


def rollout_bucket(flag_name: str, user_id: str) -> int:
    digest = hashlib.new(ROLLOUT_DIGEST, f"{flag_name}:{user_id}".encode("utf-8")).hexdigest()
    return int(digest[:ROLLOUT_PREFIX_HEX_CHARS], 16) % ROLLOUT_BUCKETS


def is_in_percentage(user_id: str, flag_name: str, percentage: int) -> bool:
    """Deterministic check: the same user always lands in the same bucket for a flag."""
    if percentage >= 100:
        return True
    if percentage <= 0:
        return False
    return rollout_bucket(flag_name, user_id) < percentage


def sample_percentage(percentage: int, rng: Callable[[], float] = random.random) -> bool:
    """Anonymous traffic: an independent draw per call, not sticky."""
    if percentage >= 100:
        return True
    if percentage <= 0:
        return False
    return rng() * 100 < percentage
