"""Config – verifier settings, environment loading and config errors."""
from cognito_jwt_verifier.config.errors import (
    ConfigError,
    InvalidSettingValueError,
    MissingRequiredSettingError,
)
from cognito_jwt_verifier.config.settings import (
    EnvSettingsLoader,
    Settings,
    VerifierSettings,
    check_identifier,
)

__all__ = [
    "ConfigError",
    "EnvSettingsLoader",
    "InvalidSettingValueError",
    "MissingRequiredSettingError",
    "Settings",
    "VerifierSettings",
    "check_identifier",
]
