"""Startup helpers: load config and build the registries the routes run on."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from .activity.audit import AuditTrail
from .activity.registry import ActivityRegistry
from .cache.memory import QueryCache
from .change_requests.engine import WorkflowEngine
from .change_requests.loader import load_requests_from_yaml, save_requests_to_yaml
from .change_requests.registry import ChangeRequestRegistry
from .config import Config
from .directory.loader import load_directory_from_yaml
from .directory.registry import DirectoryRegistry

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "PMO_CONFIG"
DEFAULT_CONFIG_PATH = "config.yaml"


@dataclass
class Services:
    """Everything the HTTP layer needs, built once per process."""
    config: Config
    directory: DirectoryRegistry
    requests: ChangeRequestRegistry
    activity: ActivityRegistry
    cache: QueryCache
    engine: WorkflowEngine
    requests_yaml_path: str | None = None


def load_config(path: str | None = None) -> tuple[Config, Path | None]:
    """Load config from path, $PMO_CONFIG or config.yaml; defaults if none exists."""
    config_path = Path(path or os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH))
    if config_path.exists():
        logger.info(f"Loading config from {config_path}")
        if config_path.suffix == ".json":
            return Config.from_json(str(config_path)), config_path
        return Config.from_yaml(str(config_path)), config_path

    logger.info(f"Config file {config_path} not found, using defaults")
    return Config(), None


def configure_logging(config: Config) -> None:
    logging.basicConfig(
        level=getattr(logging, config.logging.level.upper(), logging.INFO),
        format=config.logging.format,
    )


def _resolve(path: str | None, config_path: Path | None) -> str | None:
    """Resolve a data file path relative to the config file's directory."""
    if not path:
        return None
    p = Path(path)
    if not p.is_absolute() and config_path is not None:
        p = config_path.parent / p
    return str(p)


def build_directory(config: Config, config_path: Path | None = None) -> DirectoryRegistry:
    directory = DirectoryRegistry()
    directory_file = _resolve(config.storage.directory_file, config_path)
    if directory_file:
        load_directory_from_yaml(directory_file, directory)
    return directory


def build_request_registry(
    config: Config,
    config_path: Path | None = None,
) -> tuple[ChangeRequestRegistry, str | None]:
    """Build the change request registry, loading and (optionally) persisting to YAML."""
    registry = ChangeRequestRegistry()
    yaml_path = _resolve(config.storage.requests_file, config_path)

    if yaml_path:
        load_requests_from_yaml(yaml_path, registry)
        if config.storage.autosave:
            registry.set_commit_hook(lambda: save_requests_to_yaml(yaml_path, registry))
            logger.info(f"Change requests persisted to {yaml_path}")

    return registry, yaml_path


def build_services(config: Config, config_path: Path | None = None) -> Services:
    """Wire registries, cache, audit trail and engine together."""
    directory = build_directory(config, config_path)
    requests, yaml_path = build_request_registry(config, config_path)
    activity = ActivityRegistry()
    cache = QueryCache(
        max_size=config.cache.max_size,
        default_ttl_seconds=config.cache.default_ttl_seconds,
        enabled=config.cache.enabled,
    )
    engine = WorkflowEngine(
        store=requests,
        audit=AuditTrail(activity=activity, cache=cache),
        directory=directory,
        cache=cache,
    )
    return Services(
        config=config,
        directory=directory,
        requests=requests,
        activity=activity,
        cache=cache,
        engine=engine,
        requests_yaml_path=yaml_path,
    )
