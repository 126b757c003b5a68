"""Configuration management for fleettop"""

import os
from pathlib import Path
from typing import Optional, Literal

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AgentConfig(BaseModel):
    """Capture agent configuration"""
    host: str = "0.0.0.0"
    port: int = 8080
    capture_interval: float = 10.0  # seconds between samples
    disk_mount: str = "/"
    capture_on_start: bool = False
    strict_reads: bool = False  # fail the whole /view on one malformed line


class AggregatorConfig(BaseModel):
    """Aggregation server configuration"""
    host: str = "0.0.0.0"
    port: int = 8081
    poll_interval: float = 60.0  # seconds between polling cycles
    poll_window: str = "1m"  # duration requested from each agent's /view
    fetch_timeout: float = 10.0  # per-agent HTTP timeout
    top_limit: int = 10
    poll_on_start: bool = True


class StorageConfig(BaseModel):
    """Storage paths configuration"""
    base_dir: Path = Path(".")
    capture_file: str = "htop_data.json"
    db_name: str = "metrics.db"

    @property
    def capture_path(self) -> Path:
        return self.base_dir / self.capture_file

    @property
    def db_path(self) -> Path:
        return self.base_dir / self.db_name


class LoggingConfig(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    json_output: bool = Field(default=False, alias="json")

    model_config = {"populate_by_name": True}


class Config(BaseSettings):
    """Main fleettop configuration"""
    agent: AgentConfig = Field(default_factory=AgentConfig)
    aggregator: AggregatorConfig = Field(default_factory=AggregatorConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    debug: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="FLEETTOP_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )


DEFAULT_CONFIG_NAME = "fleettop.yaml"

_config: Optional[Config] = None


def default_config_path() -> Path:
    env = os.environ.get("FLEETTOP_CONFIG")
    return Path(env) if env else Path.cwd() / DEFAULT_CONFIG_NAME


def get_config() -> Config:
    """Get or create the global config instance"""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(cfg: Optional[Config]) -> None:
    """Replace the global config (None drops the cache)."""
    global _config
    _config = cfg


def load_config(path: Optional[Path] = None) -> Config:
    """Load configuration from YAML file"""
    if path is None:
        path = default_config_path()

    if not path.exists():
        return Config()

    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}

    # Parse nested configs
    config_data = {}
    if "agent" in data:
        config_data["agent"] = AgentConfig(**data["agent"])
    if "aggregator" in data:
        config_data["aggregator"] = AggregatorConfig(**data["aggregator"])
    if "storage" in data:
        s = dict(data["storage"])
        if "base_dir" in s and not isinstance(s["base_dir"], Path):
            s["base_dir"] = Path(s["base_dir"])
        config_data["storage"] = StorageConfig(**s)
    if "logging" in data:
        config_data["logging"] = LoggingConfig(**data["logging"])
    if "debug" in data:
        config_data["debug"] = data["debug"]

    return Config(**config_data)


def save_config(config: Config, path: Optional[Path] = None):
    """Save configuration to YAML file"""
    if path is None:
        path = default_config_path()

    path.parent.mkdir(parents=True, exist_ok=True)

    data = {
        "agent": config.agent.model_dump(),
        "aggregator": config.aggregator.model_dump(),
        "storage": {
            "base_dir": str(config.storage.base_dir),
            "capture_file": config.storage.capture_file,
            "db_name": config.storage.db_name,
        },
        "logging": config.logging.model_dump(by_alias=True),
        "debug": config.debug,
    }

    with open(path, "w") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)
