"""Configuration for the approvals service."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ServerConfig:
    """HTTP server configuration."""
    host: str = "0.0.0.0"
    port: int = 8060
    workers: int = 1
    reload: bool = False


@dataclass
class StorageConfig:
    """Where change requests and the user/project directory live."""
    requests_file: str | None = "change_requests.yaml"
    directory_file: str | None = "directory.yaml"

    # Write-through persistence of every change request mutation
    autosave: bool = True


@dataclass
class CacheConfig:
    """Query cache configuration."""
    enabled: bool = True
    max_size: int = 10000
    default_ttl_seconds: float = 60.0


@dataclass
class LoggingConfig:
    """Logging configuration (applied once at startup)."""
    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass
class Config:
    """Main configuration container."""
    project_name: str = "PMO Approvals"
    server: ServerConfig = field(default_factory=ServerConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: dict) -> Config:
        """Create config from dictionary."""
        return cls(
            project_name=data.get("project_name", "PMO Approvals"),
            server=ServerConfig(**data.get("server", {})),
            storage=StorageConfig(**data.get("storage", {})),
            cache=CacheConfig(**data.get("cache", {})),
            logging=LoggingConfig(**data.get("logging", {})),
        )

    @classmethod
    def from_yaml(cls, path: str) -> Config:
        """Load config from YAML file."""
        import yaml
        with open(path, "r") as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data or {})

    @classmethod
    def from_json(cls, path: str) -> Config:
        """Load config from JSON file."""
        import json
        with open(path, "r") as f:
            data = json.load(f)
        return cls.from_dict(data)
