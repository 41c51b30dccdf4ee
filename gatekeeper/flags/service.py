# gatekeeper/flags/service.py
"""
Two-layer feature flag service.

Layer 1: declarative definitions (JSON document, the source of truth)
Layer 2: runtime overrides in the shared store (instant toggle, no deploy)

Overrides win over the declared value for every flag type, but a flag
declared ``enabled: false`` is off no matter what the store says.
"""

import json
import logging
from pathlib import Path
import random
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from gatekeeper.core.config import settings
from gatekeeper.core.exceptions import ConfigurationError
from gatekeeper.core.validation import validate_config
from gatekeeper.monitoring.prometheus_metrics import flag_reload_total
from gatekeeper.storage import StorageBackend

from .models import FlagConfig, FlagContext, FlagDefinition, FlagState, FlagValue
from .rollout import is_in_percentage, sample_percentage

logger = logging.getLogger(__name__)

_GLOB_CHARS = set("*?[]\\")


def load_flag_document(path: Union[str, Path]) -> Dict[str, Any]:
    """Read a flag definition document from disk."""
    path = Path(path)
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ConfigurationError(f"Flag file not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(
            f"Flag file {path} is not valid JSON",
            details={"line": exc.lineno, "column": exc.colno},
        ) from exc


class FlagService:
    """
    Evaluate feature flags for callers.

    Args:
        config: ``FlagConfig`` or the raw definition document
        store: optional shared store for runtime overrides
        key_prefix: store key prefix for overrides
        source: callable returning the definition document; ``reload()`` calls it
        rng: random source for percentage flags evaluated without a user id

    Example:
        # Definitions only (no overrides)
        flags = FlagService(config={"version": 1, "flags": [{"name": "dark-mode", "defaultValue": False}]})

        # With Redis for runtime overrides
        flags = FlagService.from_file("flags.json", store=create_redis_backend())
    """

    def __init__(
        self,
        config: Any = None,
        store: Optional[StorageBackend] = None,
        key_prefix: Optional[str] = None,
        *,
        source: Optional[Callable[[], Any]] = None,
        rng: Callable[[], float] = random.random,
    ) -> None:
        if source is None:
            if config is None:
                raise ConfigurationError("FlagService needs a config or a source")
            source = lambda: config  # noqa: E731
        prefix = settings.flag_override_prefix if key_prefix is None else key_prefix
        if _GLOB_CHARS & set(prefix):
            raise ConfigurationError(f"Flag override prefix {prefix!r} must not contain glob characters")

        self._source = source
        self._store = store
        self._prefix = prefix
        self._rng = rng
        self._flags = self._parse()

    @classmethod
    def from_file(
        cls,
        path: Optional[Union[str, Path]] = None,
        store: Optional[StorageBackend] = None,
        key_prefix: Optional[str] = None,
        **kwargs: Any,
    ) -> "FlagService":
        """Build a service whose definitions (and reloads) come from a JSON file (default: ``settings.flags_file``)."""
        flag_path = path if path is not None else settings.flags_file
        if not flag_path:
            raise ConfigurationError("No flag file given and GATEKEEPER_FLAGS_FILE is not set")
        return cls(store=store, key_prefix=key_prefix, source=lambda: load_flag_document(flag_path), **kwargs)

    def _parse(self) -> Dict[str, FlagDefinition]:
        parsed = validate_config(FlagConfig, self._source())
        return {flag.name: flag for flag in parsed.flags}

    def _key(self, name: str) -> str:
        return f"{self._prefix}{name}"

    async def _get_override(self, name: str) -> Optional[bool]:
        if self._store is None:
            return None
        value = await self._store.get(self._key(name))
        if value is None:
            return None
        return value == "true"

    async def is_enabled(self, name: str, context: Optional[Union[FlagContext, Mapping[str, Any]]] = None) -> bool:
        flag = self._flags.get(name)
        if flag is None or not flag.enabled:
            return False

        # Check store override first
        override = await self._get_override(name)
        if override is not None:
            return override

        if flag.type == "boolean":
            return bool(flag.default_value)

        percentage = int(flag.default_value)
        user_id = _user_id(context)
        if not user_id:
            # No user id: use the percentage as a probability
            return sample_percentage(percentage, self._rng)
        return is_in_percentage(user_id, name, percentage)

    async def get_value(self, name: str) -> Optional[FlagValue]:
        flag = self._flags.get(name)
        if flag is None:
            return None

        override = await self._get_override(name)
        if override is not None:
            return override
        return flag.default_value

    async def overrides(self) -> Dict[str, bool]:
        """Every override currently in the store, declared or not."""
        if self._store is None:
            return {}
        found: Dict[str, bool] = {}
        for key in await self._store.keys(f"{self._prefix}*"):
            value = await self._store.get(key)
            if value is not None:
                found[key[len(self._prefix):]] = value == "true"
        return found

    async def list(self) -> List[FlagState]:
        current = await self.overrides()
        states = []
        for flag in self._flags.values():
            override = current.get(flag.name)
            states.append(
                FlagState(
                    name=flag.name,
                    description=flag.description,
                    type=flag.type,
                    defined_value=flag.default_value,
                    runtime_override=override,
                    effective_value=override if override is not None else flag.default_value,
                )
            )
        return states

    async def toggle(self, name: str, value: bool) -> None:
        if self._store is None:
            raise ConfigurationError(
                "A shared store is required for runtime flag overrides. "
                "Configure Redis or change the flag definitions and redeploy."
            )
        await self._store.set(self._key(name), "true" if value else "false")
        logger.info(f"Flag {name}: runtime override set to {value}")

    async def remove_override(self, name: str) -> None:
        if self._store is None:
            return
        await self._store.delete(self._key(name))
        logger.info(f"Flag {name}: runtime override removed")

    async def reload(self) -> None:
        """Re-read and re-validate definitions; overrides are left untouched."""
        self._flags = self._parse()
        flag_reload_total.inc()
        logger.info(f"Reloaded {len(self._flags)} flag definitions")


def _user_id(context: Optional[Union[FlagContext, Mapping[str, Any]]]) -> Optional[str]:
    if context is None:
        return None
    if isinstance(context, FlagContext):
        return context.user_id
    value = context.get("user_id", context.get("userId"))
    return None if value is None else str(value)
