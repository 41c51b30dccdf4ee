# gatekeeper/flags/models.py
"""
Feature flag schemas.

The definition document is the declarative, git-tracked source of truth:

    {"version": 1, "flags": [{"name": "dark-mode", "defaultValue": false}]}
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    field_validator,
    model_validator,
)

FlagType = Literal["boolean", "percentage"]
FlagValue = Union[bool, int]


class FlagDefinition(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    name: StrictStr = Field(min_length=1)
    description: StrictStr = ""
    type: FlagType = "boolean"
    # true/false for boolean flags, 0-100 for percentage rollouts
    default_value: Union[StrictBool, StrictInt] = Field(alias="defaultValue")
    enabled: StrictBool = True

    @model_validator(mode="after")
    def _default_matches_type(self) -> "FlagDefinition":
        value = self.default_value
        if self.type == "boolean":
            if not isinstance(value, bool):
                raise ValueError(f"boolean flag {self.name!r} needs a true/false defaultValue")
        elif isinstance(value, bool) or not 0 <= value <= 100:
            raise ValueError(f"percentage flag {self.name!r} needs an integer defaultValue in 0-100")
        return self


class FlagConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    version: Literal[1] = 1
    flags: List[FlagDefinition]

    @field_validator("flags")
    @classmethod
    def _unique_names(cls, flags: List[FlagDefinition]) -> List[FlagDefinition]:
        seen: set[str] = set()
        duplicates = []
        for flag in flags:
            if flag.name in seen:
                duplicates.append(flag.name)
            seen.add(flag.name)
        if duplicates:
            raise ValueError(f"duplicate flag names: {', '.join(sorted(set(duplicates)))}")
        return flags


@dataclass(frozen=True)
class FlagContext:
    # Hashed with the flag name for sticky percentage rollouts
    user_id: Optional[str] = None
    attributes: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class FlagState:
    name: str
    description: str
    type: FlagType
    defined_value: FlagValue
    runtime_override: Optional[bool]
    effective_value: FlagValue
