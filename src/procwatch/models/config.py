"""
Configuration data models.

This module contains the configuration structures loaded from `config.toml`:
the monitor's refresh and history settings, the startup watch list, and the
history export settings.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

DEFAULT_INTERVAL_SECONDS = 1.0
DEFAULT_HISTORY_LENGTH = 100
MIN_INTERVAL_SECONDS = 0.01

SUPPORTED_COMPRESSIONS = ("snappy", "gzip", "brotli", "lz4", "zstd")


@dataclass
class StorageConfig:
    """
    Configuration model for history export.

    Attributes:
        compression: Compression algorithm for Parquet files
            - 'snappy': Fast compression/decompression (default)
            - 'gzip': Higher compression ratio, slower
            - 'brotli': Very high compression ratio
            - 'lz4': Very fast compression
            - 'zstd': Modern balanced compression
        export_dir: Directory group histories are exported to when monitoring
            stops. None disables the export.
    """

    compression: Literal["snappy", "gzip", "brotli", "lz4", "zstd"] = "snappy"
    export_dir: Optional[Path] = None

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "StorageConfig":
        """
        Create a StorageConfig instance from a dictionary.

        Args:
            config_dict: Dictionary containing storage configuration

        Returns:
            StorageConfig instance

        Raises:
            ValueError: If invalid configuration values are provided
        """
        compression = config_dict.get("compression", "snappy")
        if compression not in SUPPORTED_COMPRESSIONS:
            raise ValueError(f"Unsupported compression algorithm: {compression}")

        export_dir = config_dict.get("export_dir", "")
        if not isinstance(export_dir, str):
            raise ValueError(f"export_dir must be a string, got {export_dir!r}")

        return cls(
            compression=compression,
            export_dir=Path(export_dir) if export_dir else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "compression": self.compression,
            "export_dir": str(self.export_dir) if self.export_dir else "",
        }


@dataclass
class MonitorConfig:
    """
    Configuration for the monitor's global behavior, loaded from `config.toml`.
    """

    # [monitor.general]
    log_level: str = "INFO"
    # Identifier strings ("firefox", "pid:42") watched at startup.
    watch: List[str] = field(default_factory=list)

    # [monitor.collection]
    interval_seconds: float = DEFAULT_INTERVAL_SECONDS
    history_length: int = DEFAULT_HISTORY_LENGTH
    include_threads: bool = False

    # [monitor.storage]
    storage: StorageConfig = field(default_factory=StorageConfig)


@dataclass
class AppConfig:
    """
    The root configuration object that aggregates all loaded settings.
    """

    # The global monitor configuration.
    monitor: MonitorConfig
