# gatekeeper/ratelimit/config.py
from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr

from gatekeeper.core.config import settings


class RateLimitConfig(BaseModel):
    """Sliding window limits for one limiter instance."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    # Maximum number of requests allowed in the window
    max: StrictInt = Field(gt=0)
    window_seconds: StrictInt = Field(gt=0, alias="windowSeconds")
    key_prefix: StrictStr = Field(default_factory=lambda: settings.rate_limit_key_prefix, alias="keyPrefix")


# Default rate limit for auth endpoints: 5 per 15 minutes
AUTH_RATE_LIMIT = RateLimitConfig(max=5, window_seconds=15 * 60, key_prefix="rl:auth:")

# Default rate limit for API endpoints: 100 per minute
API_RATE_LIMIT = RateLimitConfig(max=100, window_seconds=60, key_prefix="rl:api:")
