from typing import Dict

from fastapi import Response

from .limiter import RateLimitInfo


def to_rate_limit_headers(info: RateLimitInfo) -> Dict[str, str]:
    headers = {
        "X-RateLimit-Limit": str(info.limit),
        "X-RateLimit-Remaining": str(max(info.remaining, 0)),
        "X-RateLimit-Reset": str(int(info.reset_at)),
    }
    if info.retry_after is not None:
        headers["Retry-After"] = str(int(info.retry_after))
    return headers


def set_rate_headers(res: Response, info: RateLimitInfo) -> None:
    for name, value in to_rate_limit_headers(info).items():
        res.headers[name] = value
