"""Config settings – VerifierSettings and the environment loader.

The verifier itself only needs a region and a user pool id; this module lets
an application source them (plus timeout and cache TTL) from ``COGNITO_*``
environment variables.
"""
from __future__ import annotations

import dataclasses
import os
import re
from typing import Any, ClassVar, TypeVar

from cognito_jwt_verifier.config.errors import (
    ConfigError,
    InvalidSettingValueError,
    MissingRequiredSettingError,
)

_IDENTIFIER_RE = re.compile(r"[A-Za-z0-9_-]+")


def check_identifier(name: str, value: object) -> str:
    """Return *value* if it can be embedded in the JWKS URL path, else raise."""
    if not isinstance(value, str) or not _IDENTIFIER_RE.fullmatch(value):
        raise InvalidSettingValueError(
            name, value, "expected a non-empty string of letters, digits, '_' or '-'"
        )
    return value


@dataclasses.dataclass
class Settings:
    """Base class for 12-factor settings."""

    _prefix: ClassVar[str] = ""

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        """Override to add cross-field validation."""


@dataclasses.dataclass
class VerifierSettings(Settings):
    """Settings for a :class:`~cognito_jwt_verifier.verifier.Verifier`.

    Attributes
    ----------
    region:
        AWS region of the user pool, e.g. ``eu-west-1``.
    user_pool_id:
        Cognito user pool id, e.g. ``eu-west-1_AbCdEf123``.
    fetch_timeout:
        Seconds before a JWKS request is abandoned.
    cache_ttl:
        Seconds a fetched key set is reused.  ``0`` fetches on every call.
    """

    _prefix: ClassVar[str] = "COGNITO"

    region: str
    user_pool_id: str
    fetch_timeout: float = 5.0
    cache_ttl: float = 0.0

    def _validate(self) -> None:
        check_identifier("region", self.region)
        check_identifier("user_pool_id", self.user_pool_id)
        if self.fetch_timeout <= 0:
            raise InvalidSettingValueError("fetch_timeout", self.fetch_timeout, "must be positive")
        if self.cache_ttl < 0:
            raise InvalidSettingValueError("cache_ttl", self.cache_ttl, "must not be negative")


T = TypeVar("T", bound=Settings)


class EnvSettingsLoader:
    """Load settings from OS environment variables.

    Each field maps to ``{PREFIX}_{FIELD}`` upper-cased, so
    :class:`VerifierSettings` reads ``COGNITO_REGION``, ``COGNITO_USER_POOL_ID``,
    ``COGNITO_FETCH_TIMEOUT`` and ``COGNITO_CACHE_TTL``.
    """

    def __init__(self, environ: dict[str, str] | None = None) -> None:
        self._environ = environ

    def load(self, settings_class: type[T]) -> T:
        environ = os.environ if self._environ is None else self._environ
        prefix = getattr(settings_class, "_prefix", "").upper()
        kwargs: dict[str, Any] = {}

        for field in dataclasses.fields(settings_class):
            env_key = f"{prefix}_{field.name}".upper().lstrip("_")
            raw = environ.get(env_key)

            if raw is None:
                if (
                    field.default is dataclasses.MISSING
                    and field.default_factory is dataclasses.MISSING
                ):
                    raise MissingRequiredSettingError(env_key)
                continue

            kwargs[field.name] = self._coerce(env_key, raw, field.type)

        try:
            return settings_class(**kwargs)
        except ConfigError:
            raise
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Failed to load settings: {exc}", cause=exc) from exc

    def _coerce(self, env_key: str, value: str, type_hint: Any) -> Any:
        try:
            if type_hint is int or type_hint == "int":
                return int(value)
            if type_hint is float or type_hint == "float":
                return float(value)
        except ValueError as exc:
            raise InvalidSettingValueError(env_key, value, f"expected {type_hint}") from exc
        return value


__all__ = ["EnvSettingsLoader", "Settings", "VerifierSettings", "check_identifier"]
