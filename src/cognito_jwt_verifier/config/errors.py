"""Errors raised while building a verifier's configuration."""
from cognito_jwt_verifier.kernel.errors import BaseError


class ConfigError(BaseError):
    """The verifier cannot be configured; raised at construction or load time, never from ``verify``."""
    default_code = "config_error"


class MissingRequiredSettingError(ConfigError):
    """A ``COGNITO_*`` variable the settings need (region or user pool id) is unset."""
    default_code = "missing_required_setting"

    def __init__(self, setting_name: str) -> None:
        super().__init__(f"Required setting '{setting_name}' is missing")
        self.setting_name = setting_name


class InvalidSettingValueError(ConfigError):
    """A region or pool id that cannot go into the JWKS URL, or a bad timeout / TTL."""
    default_code = "invalid_setting_value"

    def __init__(self, setting_name: str, value: object, reason: str) -> None:
        super().__init__(f"Setting '{setting_name}' rejected {value!r}: {reason}")
        self.setting_name = setting_name
        self.value = value
        self.reason = reason


__all__ = ["ConfigError", "InvalidSettingValueError", "MissingRequiredSettingError"]
