"""
Statement import configuration settings.

The chunk sizes are limits of the storage collaborator, not of the import
algorithm, so they are read from the environment with defaults.
"""
import os
from dataclasses import dataclass, fields
from typing import Dict, Any


@dataclass
class ImportConfig:
    """Configuration for statement parsing and batch reconciliation."""

    existence_check_chunk_size: int = 30  # max values per "importHash IN (...)" query
    write_batch_size: int = 500  # max records per atomic write batch
    max_file_bytes: int = 5 * 1024 * 1024

    def __post_init__(self):
        for field in fields(self):
            value = getattr(self, field.name)
            if not isinstance(value, int) or value <= 0:
                raise ValueError(f"{field.name} must be a positive integer, got {value!r}")

    @classmethod
    def from_environment(cls) -> 'ImportConfig':
        """
        Create configuration from environment variables with fallback to defaults.

        Environment variables:
        - IMPORT_EXISTENCE_CHUNK_SIZE
        - IMPORT_WRITE_BATCH_SIZE
        - IMPORT_MAX_FILE_BYTES
        """
        return cls(
            existence_check_chunk_size=int(os.getenv('IMPORT_EXISTENCE_CHUNK_SIZE', 30)),
            write_batch_size=int(os.getenv('IMPORT_WRITE_BATCH_SIZE', 500)),
            max_file_bytes=int(os.getenv('IMPORT_MAX_FILE_BYTES', 5 * 1024 * 1024))
        )


# Global configuration instance
import_config = ImportConfig.from_environment()


def get_import_config() -> ImportConfig:
    """Get the global import configuration instance."""
    return import_config


def update_config_from_dict(config_dict: Dict[str, Any]) -> None:
    """
    Update configuration from a dictionary (useful for testing).

    Args:
        config_dict: Dictionary with configuration values
    """
    global import_config

    current_values = {
        field.name: getattr(import_config, field.name)
        for field in fields(import_config)
    }
    current_values.update(config_dict)

    import_config = ImportConfig(**current_values)
