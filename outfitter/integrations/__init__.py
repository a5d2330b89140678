"""Connectivity checks used by operators before and after deploys."""

from .checks import (
    IntegrationCheckResult,
    check_background_removal,
    check_database,
    check_media_storage,
    check_suggestion_model,
    run_all_checks,
)

__all__ = [
    "IntegrationCheckResult",
    "check_background_removal",
    "check_database",
    "check_media_storage",
    "check_suggestion_model",
    "run_all_checks",
]
