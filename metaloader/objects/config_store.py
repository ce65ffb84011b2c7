"""TOML-backed store of load configurations.

The store file holds one table per configuration, keyed by config name::

    [config.employees]
    source_file_path = "data/employees.csv"
    target_table_name = "EMPLOYEES"
    delimiter = ","
    has_header = true
    chunk_size = 100

    [[config.employees.column_configs]]
    source_column_name = "id"
    target_column_name = "ID"
    data_type = "NUMBER"
    column_order = 1
    validation_rule = "NUMERIC"

Every lookup re-reads the file, so each call sees one consistent snapshot.
"""

import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import toml
from pydantic import BaseModel, ValidationError, model_validator

from metaloader.exceptions import ConfigurationError, ConfigurationMissing
from metaloader.logging_config import get_logger
from metaloader.objects.file_config import ColumnConfig, FileConfig

logger = get_logger(__name__)


class ConfigStoreDocument(BaseModel):
    """Root of the store file: config name -> FileConfig."""

    config: Dict[str, FileConfig] = {}

    @model_validator(mode="before")
    @classmethod
    def fill_config_names(cls, data: Any) -> Any:
        """The table key is the config name unless the table sets one."""
        if isinstance(data, dict) and isinstance(data.get("config"), dict):
            for name, body in data["config"].items():
                if isinstance(body, dict):
                    body.setdefault("config_name", name)
        return data

    @model_validator(mode="after")
    def validate_keys(self) -> "ConfigStoreDocument":
        for key, file_config in self.config.items():
            if key != file_config.config_name:
                raise ValueError(
                    f"Config table '{key}' declares config_name '{file_config.config_name}'"
                )
        return self


def _now() -> datetime:
    # TOML local date-times carry no zone and whole seconds keep files readable
    return datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)


class ConfigStore:
    """Lookup and maintenance of load configurations in a TOML file.

    Attributes:
        store_path: Location of the TOML store file
    """

    def __init__(self, store_path: Path) -> None:
        self.store_path = Path(store_path)
        self._lock = threading.Lock()

    def get_file_config(self, config_name: str) -> Optional[FileConfig]:
        """Return the active config with its columns ordered, or None if absent."""
        file_config = self._load().config.get(config_name)
        if file_config is None or not file_config.is_active:
            return None
        return file_config.model_copy(
            update={"column_configs": file_config.ordered_columns()}
        )

    def require_file_config(self, config_name: str) -> FileConfig:
        """Return the active config or raise ConfigurationMissing."""
        file_config = self.get_file_config(config_name)
        if file_config is None:
            raise ConfigurationMissing(config_name)
        return file_config

    def list_active_configs(self) -> List[FileConfig]:
        document = self._load()
        return [
            file_config.model_copy(
                update={"column_configs": file_config.ordered_columns()}
            )
            for _, file_config in sorted(document.config.items())
            if file_config.is_active
        ]

    def create_file_config(
        self,
        config_name: str,
        source_file_path: str,
        target_table_name: str,
        columns: List[ColumnConfig],
        delimiter: str = ",",
        has_header: bool = True,
        chunk_size: int = 100,
    ) -> FileConfig:
        """Create and persist a new active configuration.

        Raises:
            ConfigurationError: If an active config with the same name exists
        """
        with self._lock:
            document = self._load()
            existing = document.config.get(config_name)
            if existing is not None and existing.is_active:
                raise ConfigurationError(f"Configuration already exists: {config_name}")

            now = _now()
            try:
                file_config = FileConfig(
                    config_name=config_name,
                    source_file_path=source_file_path,
                    target_table_name=target_table_name,
                    delimiter=delimiter,
                    has_header=has_header,
                    chunk_size=chunk_size,
                    is_active=True,
                    created_date=now,
                    updated_date=now,
                    column_configs=columns,
                )
            except ValidationError as e:
                raise ConfigurationError(f"Invalid configuration {config_name}\n{e}") from e

            document.config[config_name] = file_config
            self._save(document)

        logger.info(
            f"Created file configuration: {config_name} with {len(columns)} columns"
        )
        return file_config

    def deactivate_config(self, config_name: str) -> bool:
        """Mark an active configuration inactive.

        Returns:
            True if a config was deactivated, False if none was active
        """
        with self._lock:
            document = self._load()
            existing = document.config.get(config_name)
            if existing is None or not existing.is_active:
                return False

            document.config[config_name] = existing.model_copy(
                update={"is_active": False, "updated_date": _now()}
            )
            self._save(document)

        logger.info(f"Deactivated configuration: {config_name}")
        return True

    def _load(self) -> ConfigStoreDocument:
        if not self.store_path.exists():
            return ConfigStoreDocument()

        try:
            raw = toml.load(self.store_path)
        except toml.TomlDecodeError as e:
            raise ConfigurationError(f"Unreadable config store {self.store_path}: {e}") from e

        try:
            return ConfigStoreDocument(**raw)
        except ValidationError as e:
            raise ConfigurationError(
                f"Validation Failed for {self.store_path.name}\n{e}"
            ) from e

    def _save(self, document: ConfigStoreDocument) -> None:
        payload = document.model_dump(exclude_none=True)
        self.store_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.store_path, "w", encoding="utf-8") as store_file:
            toml.dump(payload, store_file)
