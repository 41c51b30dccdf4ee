"""Feature flags: declarative definitions plus optional runtime overrides."""

from .models import FlagConfig, FlagContext, FlagDefinition, FlagState
from .rollout import is_in_percentage, rollout_bucket
from .service import FlagService, load_flag_document

__all__ = [
    "FlagConfig",
    "FlagContext",
    "FlagDefinition",
    "FlagService",
    "FlagState",
    "is_in_percentage",
    "load_flag_document",
    "rollout_bucket",
]
