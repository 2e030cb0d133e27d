"""
Configuration management for regionquery.

Settings are layered, later layers winning:

    defaults
    ~/.config/regionquery/config.toml   (user)
    ./regionquery.toml                  (local)
    --config FILE                       (explicit)
    REGIONQUERY_* environment variables
    command-line flags                  (init_config)
"""
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

import tomli
import tomli_w


ENV_PREFIX = "REGIONQUERY_"
LOCAL_CONFIG_NAME = "regionquery.toml"
TRUE_STRINGS = ("true", "1", "yes", "on")


def user_config_path() -> Path:
    return Path.home() / ".config" / "regionquery" / "config.toml"


@dataclass
class RegionQueryConfig:
    """
    Effective settings for one process.

    Attributes:
        database: SQLite file used when no URL is set
        database_url: SQLAlchemy URL, takes precedence over ``database``
        database_echo: Log emitted SQL
        connection_pool_size: Pool size for server databases
        connection_timeout: Connect timeout in seconds for server databases
        max_workers: Threads for sibling operands (1 = sequential)
        output_file: Default target of ``regionquery run``
        log_level: Root log level for the command line
    """

    database: str = "regionquery.db"
    database_url: Optional[str] = None
    database_echo: bool = False
    connection_pool_size: int = 5
    connection_timeout: int = 30
    max_workers: int = 1
    output_file: str = "output.txt"
    log_level: str = "WARNING"

    @classmethod
    def load(cls, config_file: Optional[Path] = None) -> "RegionQueryConfig":
        """
        Build the configuration from every file layer and the environment.

        Args:
            config_file: Explicit file, applied after the user and local
                files. Ignored when it does not exist.
        """
        config = cls()
        for path in cls._file_layers(config_file):
            with open(path, "rb") as f:
                config.update(tomli.load(f))
        config.update(cls._env_layer())

        for name in ("database", "output_file"):
            setattr(config, name, os.path.expanduser(os.path.expandvars(getattr(config, name))))
        return config

    @staticmethod
    def _file_layers(config_file: Optional[Path]) -> Iterator[Path]:
        for path in (user_config_path(), Path.cwd() / LOCAL_CONFIG_NAME, config_file):
            if path is not None and path.exists():
                yield path

    @classmethod
    def _env_layer(cls) -> Dict[str, Any]:
        types = {f.name: f.type for f in fields(cls)}
        values: Dict[str, Any] = {}
        for key, raw in os.environ.items():
            if not key.startswith(ENV_PREFIX):
                continue
            name = key[len(ENV_PREFIX):].lower()
            if name not in types:
                continue
            if types[name] in (bool, "bool"):
                values[name] = raw.lower() in TRUE_STRINGS
            elif types[name] in (int, "int"):
                values[name] = int(raw)
            else:
                values[name] = raw
        return values

    def update(self, data: Dict[str, Any]):
        """Apply known settings from ``data``; unknown keys are ignored."""
        known = {f.name for f in fields(self)}
        for key, value in data.items():
            if key in known:
                setattr(self, key, value)

    def save(self, path: Optional[Path] = None) -> Path:
        """
        Write the settings as TOML (to the user file by default).

        Unset values are left out, TOML having no null.
        """
        path = path or user_config_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as f:
            tomli_w.dump({k: v for k, v in self.to_dict().items() if v is not None}, f)
        return path

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# Process-wide configuration
_config: Optional[RegionQueryConfig] = None


def get_config(reload: bool = False, config_file: Optional[Path] = None) -> RegionQueryConfig:
    """Return the process-wide configuration, loading it on first use."""
    global _config
    if _config is None or reload or config_file:
        _config = RegionQueryConfig.load(config_file)
    return _config


def init_config(database: Optional[str] = None, config_file: Optional[Path] = None, **overrides) -> RegionQueryConfig:
    """
    Load the configuration and apply command-line overrides on top.

    Overrides that are None (flags not given) leave the loaded value.
    """
    config = get_config(config_file=config_file)
    overrides["database"] = database
    config.update({k: v for k, v in overrides.items() if v is not None})
    return config
