import hashlib

import pytest

from gatekeeper.flags.rollout import is_in_percentage, rollout_bucket, sample_percentage


def test_bucket_matches_documented_digest_contract():
    digest = hashlib.sha256(b"new-checkout:user-42").hexdigest()
    assert rollout_bucket("new-checkout", "user-42") == int(digest[:8], 16) % 100


def test_bucket_is_stable():
    buckets = {rollout_bucket("new-checkout", "user-42") for _ in range(20)}
    assert len(buckets) == 1


def test_bucket_depends_on_flag_name():
    users = [f"user-{i}" for i in range(200)]
    first = [rollout_bucket("flag-a", u) for u in users]
    second = [rollout_bucket("flag-b", u) for u in users]
    assert first != second


@pytest.mark.parametrize("percentage", [100, 150])
def test_full_rollout_always_enabled(percentage):
    assert all(is_in_percentage(f"user-{i}", "f", percentage) for i in range(50))


@pytest.mark.parametrize("percentage", [0, -5])
def test_zero_rollout_never_enabled(percentage):
    assert not any(is_in_percentage(f"user-{i}", "f", percentage) for i in range(50))


def test_rollout_is_roughly_uniform():
    enabled = sum(is_in_percentage(f"user-{i}", "gradual", 30) for i in range(10_000))
    assert 2_500 < enabled < 3_500


def test_rollout_is_monotonic_in_percentage():
    users = [f"user-{i}" for i in range(500)]
    at_20 = {u for u in users if is_in_percentage(u, "ramp", 20)}
    at_60 = {u for u in users if is_in_percentage(u, "ramp", 60)}
    assert at_20 <= at_60


def test_sample_percentage_uses_rng():
    assert sample_percentage(50, rng=lambda: 0.49) is True
    assert sample_percentage(50, rng=lambda: 0.5) is False
    assert sample_percentage(100, rng=lambda: 0.999) is True
    assert sample_percentage(0, rng=lambda: 0.0) is False
