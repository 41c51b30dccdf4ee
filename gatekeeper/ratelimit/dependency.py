from __future__ import annotations

from typing import Callable, Iterable, Optional

from fastapi import HTTPException, Request, Response, status

from gatekeeper.core.config import settings

from .headers import set_rate_headers, to_rate_limit_headers
from .limiter import RateLimiter
from .metrics import rl_decisions, rl_skipped


def default_key(request: Request) -> str:
    """Identify the caller by client IP and scope the window to the path."""
    forwarded = request.headers.get("x-forwarded-for")
    ip = forwarded.split(",")[0].strip() if forwarded else None
    if not ip:
        ip = request.headers.get("x-real-ip")
    if not ip:
        client = getattr(request, "client", None)
        ip = getattr(client, "host", None) if client else None
    return f"{ip or 'unknown'}:{request.url.path}"


def rate_limit(
    limiter: RateLimiter,
    key_func: Optional[Callable[[Request], str]] = None,
    skip_paths: Iterable[str] = (),
    enabled: Optional[bool] = None,
):
    """
    Build a FastAPI dependency enforcing ``limiter`` on a route or router.

    Example:
        limiter = create_in_memory_rate_limiter(API_RATE_LIMIT)
        app.include_router(router, dependencies=[Depends(rate_limit(limiter))])

    Rejected requests get a 429 carrying the standard rate-limit headers.
    Backend errors propagate; wrap the limiter if a fail-open policy is wanted.
    """
    key_for = key_func or default_key
    skipped = tuple(skip_paths)

    async def dep(request: Request, response: Response) -> None:
        is_enabled = settings.rate_limit_enabled if enabled is None else enabled
        if not is_enabled:
            rl_skipped.labels(reason="disabled").inc()
            return
        if any(request.url.path.startswith(path) for path in skipped):
            rl_skipped.labels(reason="skip_path").inc()
            return

        info = await limiter.check(key_for(request))
        prefix = limiter.config.key_prefix

        if info.allowed:
            rl_decisions.labels(key_prefix=prefix, action="allow").inc()
            set_rate_headers(response, info)
            return

        rl_decisions.labels(key_prefix=prefix, action="block").inc()
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={
                "error": "Too many requests",
                "code": "RATE_LIMITED",
                "retry_after": info.retry_after,
            },
            headers=to_rate_limit_headers(info),
        )

    return dep
