import pytest

from gatekeeper.core.exceptions import ConfigurationError
from gatekeeper.core.validation import validate_config
from gatekeeper.flags import FlagConfig


def _config(*flags, **extra):
    return {"version": 1, "flags": list(flags), **extra}


def test_defaults_are_applied():
    config = validate_config(FlagConfig, _config({"name": "dark-mode", "defaultValue": False}))
    flag = config.flags[0]
    assert flag.description == ""
    assert flag.type == "boolean"
    assert flag.enabled is True
    assert flag.default_value is False


def test_version_defaults_to_one():
    config = validate_config(FlagConfig, {"flags": []})
    assert config.version == 1


def test_percentage_flag_keeps_integer():
    config = validate_config(
        FlagConfig, _config({"name": "beta", "type": "percentage", "defaultValue": 25})
    )
    assert config.flags[0].default_value == 25
    assert not isinstance(config.flags[0].default_value, bool)


@pytest.mark.parametrize(
    "flag",
    [
        {"name": "b", "type": "boolean", "defaultValue": 1},
        {"name": "p", "type": "percentage", "defaultValue": True},
        {"name": "p", "type": "percentage", "defaultValue": 101},
        {"name": "p", "type": "percentage", "defaultValue": -1},
        {"name": "p", "type": "percentage", "defaultValue": 12.5},
        {"name": "x", "type": "multivariate", "defaultValue": True},
        {"name": "", "defaultValue": True},
        {"name": "missing-default"},
    ],
)
def test_rejects_malformed_flag(flag):
    with pytest.raises(ConfigurationError):
        validate_config(FlagConfig, _config(flag))


def test_rejects_unknown_version():
    with pytest.raises(ConfigurationError):
        validate_config(FlagConfig, {"version": 2, "flags": []})


def test_rejects_duplicate_names():
    with pytest.raises(ConfigurationError) as exc_info:
        validate_config(
            FlagConfig,
            _config({"name": "a", "defaultValue": True}, {"name": "a", "defaultValue": False}),
        )
    assert "duplicate flag names: a" in str(exc_info.value.details["errors"])
