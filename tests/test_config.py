"""Tests for config loading and service bootstrap."""

import json

import yaml

from pmo_approvals._bootstrap import build_services, load_config
from pmo_approvals.config import Config


class TestConfig:
    def test_defaults(self):
        config = Config()
        assert config.server.port == 8060
        assert config.storage.autosave is True
        assert config.cache.default_ttl_seconds == 60.0

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({
            "project_name": "Faculty PMO",
            "server": {"port": 9000},
            "cache": {"enabled": False},
            "logging": {"level": "DEBUG"},
        }))

        config = Config.from_yaml(str(path))
        assert config.project_name == "Faculty PMO"
        assert config.server.port == 9000
        assert config.server.host == "0.0.0.0"
        assert config.cache.enabled is False
        assert config.logging.level == "DEBUG"

    def test_from_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"storage": {"autosave": False}}))
        assert Config.from_json(str(path)).storage.autosave is False

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert Config.from_yaml(str(path)) == Config()


class TestBootstrap:
    def test_missing_config_uses_defaults(self, tmp_path):
        config, path = load_config(str(tmp_path / "nope.yaml"))
        assert path is None
        assert config == Config()

    def test_env_var(self, tmp_path, monkeypatch):
        path = tmp_path / "pmo.yaml"
        path.write_text(yaml.safe_dump({"server": {"port": 7000}}))
        monkeypatch.setenv("PMO_CONFIG", str(path))

        config, loaded_from = load_config()
        assert config.server.port == 7000
        assert loaded_from == path

    def test_build_services_resolves_relative_paths(self, tmp_path):
        (tmp_path / "directory.yaml").write_text(yaml.safe_dump({
            "users": [{"id": 1, "username": "admin", "role": "Administrator"}, {"id": 2, "username": "anon"}],
            "projects": [{"id": 100, "title": "Portal", "department_id": 10, "manager_user_id": 1}],
        }))
        config_path = tmp_path / "config.yaml"
        config_path.write_text(yaml.safe_dump({"storage": {"requests_file": "cr.yaml"}}))

        config, loaded_from = load_config(str(config_path))
        services = build_services(config, loaded_from)

        assert services.directory.get_user(1).permissions.can_access_admin_settings
        assert services.directory.get_user(2).role.value == "User"
        assert services.directory.get_project(100).manager_user_id == 1
        assert services.requests_yaml_path == str(tmp_path / "cr.yaml")

        services.engine.submit(services.directory.get_user(1), 100, "Scope", "Add SSO")
        assert (tmp_path / "cr.yaml").exists()
