"""
Configuration validation utilities.

This module turns the raw ``[monitor]`` table of config.toml into a validated
MonitorConfig.
"""

import logging
from typing import Any, Dict

from ..models.config import (
    DEFAULT_HISTORY_LENGTH,
    DEFAULT_INTERVAL_SECONDS,
    MIN_INTERVAL_SECONDS,
    MonitorConfig,
    StorageConfig,
)
from ..validation import (
    ValidationError,
    validate_bool,
    validate_enum_choice,
    validate_identifier_list,
    validate_positive_float,
    validate_positive_integer,
)

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def validate_monitor_config(monitor_data: Dict[str, Any]) -> MonitorConfig:
    """
    Validate and create a MonitorConfig from raw configuration data.

    Args:
        monitor_data: Raw monitor configuration from TOML

    Returns:
        Validated MonitorConfig instance

    Raises:
        ValidationError: If validation fails
    """
    general_settings = monitor_data.get("general", {})
    collection_settings = monitor_data.get("collection", {})
    storage_settings = monitor_data.get("storage", {})

    # Validate general settings
    log_level = validate_enum_choice(
        general_settings.get("log_level", "INFO"),
        valid_choices=LOG_LEVELS,
        field_name="monitor.general.log_level",
        case_sensitive=False,
    )

    watch = validate_identifier_list(
        general_settings.get("watch", []),
        field_name="monitor.general.watch",
    )

    # Validate collection settings
    interval_seconds = validate_positive_float(
        collection_settings.get("interval_seconds", DEFAULT_INTERVAL_SECONDS),
        min_value=MIN_INTERVAL_SECONDS,
        field_name="monitor.collection.interval_seconds",
    )

    history_length = validate_positive_integer(
        collection_settings.get("history_length", DEFAULT_HISTORY_LENGTH),
        min_value=1,
        field_name="monitor.collection.history_length",
    )

    include_threads = validate_bool(
        collection_settings.get("include_threads", False),
        field_name="monitor.collection.include_threads",
    )

    # Validate storage settings
    try:
        storage = StorageConfig.from_dict(storage_settings)
    except ValueError as e:
        raise ValidationError(
            f"Invalid monitor.storage settings: {e}",
            field_name="monitor.storage",
            value=storage_settings,
        ) from e

    logger.debug(
        f"Validated monitor config: interval={interval_seconds}s, "
        f"history={history_length}, threads={include_threads}, watch={watch}"
    )

    return MonitorConfig(
        log_level=log_level,
        watch=watch,
        interval_seconds=interval_seconds,
        history_length=history_length,
        include_threads=include_threads,
        storage=storage,
    )
