"""Observability – structured logging helpers."""
from cognito_jwt_verifier.observability.logging import (
    DEFAULT_SENSITIVE_FIELDS,
    SensitiveFieldsFilter,
    configure_logging,
    get_logger,
)

__all__ = ["DEFAULT_SENSITIVE_FIELDS", "SensitiveFieldsFilter", "configure_logging", "get_logger"]
