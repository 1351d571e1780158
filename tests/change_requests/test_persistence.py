"""Tests for YAML persistence of change requests."""

import yaml

from pmo_approvals._bootstrap import build_request_registry
from pmo_approvals.change_requests.loader import load_requests_from_yaml, save_requests_to_yaml
from pmo_approvals.change_requests.registry import ChangeRequestRegistry
from pmo_approvals.change_requests.types import (
    ChangeRequest,
    ChangeRequestStatus as S,
    ChangeRequestType as T,
)
from pmo_approvals.config import Config, StorageConfig


def _new(**kwargs) -> ChangeRequest:
    data = dict(id=0, project_id=100, type=T.BUDGET, details="More budget", requested_by_user_id=5)
    data.update(kwargs)
    return ChangeRequest(**data)


class TestYamlRoundTrip:
    def test_save_and_load(self, tmp_path, registry):
        created = registry.create(_new(details_ar="ميزانية"))
        registry.compare_and_set(
            created.id, S.PENDING,
            status=S.RETURNED_TO_SUB_PMO,
            rejection_reason="insufficient budget detail",
            reviewed_by_user_id=2,
        )
        path = tmp_path / "change_requests.yaml"

        assert save_requests_to_yaml(path, registry) == 1

        reloaded = ChangeRequestRegistry()
        loaded = load_requests_from_yaml(path, reloaded)
        assert len(loaded) == 1
        assert reloaded.get(created.id) == registry.get(created.id)

    def test_missing_file(self, tmp_path, registry):
        assert load_requests_from_yaml(tmp_path / "absent.yaml", registry) == []

    def test_invalid_entries_skipped(self, tmp_path, registry):
        path = tmp_path / "change_requests.yaml"
        path.write_text(yaml.safe_dump({"change_requests": [
            {"id": 1, "project_id": 100, "type": "Teleport", "requested_by_user_id": 5},
            {"id": 2, "project_id": 100, "type": "Scope", "status": "Weird", "requested_by_user_id": 5},
            {"id": 3, "project_id": 100, "type": "Scope", "status": "Approved", "requested_by_user_id": 5},
            {"id": 4, "project_id": 100, "type": "Scope", "requested_by_user_id": 5},
        ]}))

        loaded = load_requests_from_yaml(path, registry)
        assert [r.id for r in loaded] == [3, 4]
        assert loaded[0].status is S.APPROVED
        assert loaded[1].status is S.PENDING

    def test_unknown_status_never_reopens_request(self, tmp_path, registry):
        path = tmp_path / "change_requests.yaml"
        path.write_text(yaml.safe_dump({"change_requests": [
            {"id": 7, "project_id": 100, "type": "Budget", "status": "approved", "requested_by_user_id": 5},
        ]}))

        assert load_requests_from_yaml(path, registry) == []
        assert registry.get(7) is None

    def test_no_temp_file_left_behind(self, tmp_path, registry):
        registry.create(_new())
        save_requests_to_yaml(tmp_path / "cr.yaml", registry)
        assert [p.name for p in tmp_path.iterdir()] == ["cr.yaml"]


class TestWriteThrough:
    def test_every_mutation_is_persisted(self, tmp_path):
        config = Config(storage=StorageConfig(requests_file=str(tmp_path / "cr.yaml"), directory_file=None))
        registry, yaml_path = build_request_registry(config)

        created = registry.create(_new())
        registry.compare_and_set(created.id, S.PENDING, status=S.APPROVED)

        with open(yaml_path) as f:
            data = yaml.safe_load(f)
        assert data["change_requests"][0]["status"] == "Approved"

    def test_autosave_off(self, tmp_path):
        config = Config(storage=StorageConfig(
            requests_file=str(tmp_path / "cr.yaml"), directory_file=None, autosave=False,
        ))
        registry, yaml_path = build_request_registry(config)
        registry.create(_new())
        assert not (tmp_path / "cr.yaml").exists()
