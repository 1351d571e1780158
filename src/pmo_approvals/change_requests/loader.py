"""Change request persistence - YAML round-trip."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from .registry import ChangeRequestRegistry
from .types import ChangeRequest, ChangeRequestStatus, ChangeRequestType

logger = logging.getLogger(__name__)


def load_requests_from_yaml(
    path: str | Path,
    registry: ChangeRequestRegistry,
) -> list[ChangeRequest]:
    """Load change requests from a YAML file into the registry."""
    path = Path(path)
    if not path.exists():
        logger.info(f"Change requests file not found: {path}")
        return []

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if not data or "change_requests" not in data:
        return []

    loaded = []
    for req_data in data["change_requests"]:
        request = _parse_request(req_data)
        if request is None:
            continue
        loaded.append(registry.restore(request))

    logger.info(f"Loaded {len(loaded)} change requests from {path}")
    return loaded


def save_requests_to_yaml(
    path: str | Path,
    registry: ChangeRequestRegistry,
) -> int:
    """
    Save all change requests from the registry to a YAML file.

    Writes to a temporary file and renames it into place, so a failed
    write never leaves a truncated file behind.
    """
    path = Path(path)
    requests = registry.list_all()

    data: dict[str, Any] = {
        "change_requests": [_serialize_request(r) for r in requests],
    }

    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with open(tmp_path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, allow_unicode=True, sort_keys=False)
    os.replace(tmp_path, path)

    logger.debug(f"Saved {len(requests)} change requests to {path}")
    return len(requests)


def _parse_request(data: dict[str, Any]) -> ChangeRequest | None:
    """Parse a single change request from a dictionary."""
    try:
        request_type = ChangeRequestType(data["type"])
    except (KeyError, ValueError):
        logger.warning(f"Skipping change request {data.get('id')}: invalid type {data.get('type')!r}")
        return None

    status = ChangeRequestStatus.PENDING
    if "status" in data:
        try:
            status = ChangeRequestStatus(data["status"])
        except ValueError:
            logger.warning(f"Skipping change request {data.get('id')}: invalid status {data['status']!r}")
            return None

    return ChangeRequest(
        id=int(data["id"]),
        project_id=int(data["project_id"]),
        type=request_type,
        details=data.get("details", ""),
        details_ar=data.get("details_ar"),
        requested_by_user_id=int(data["requested_by_user_id"]),
        status=status,
        rejection_reason=data.get("rejection_reason"),
        reviewed_by_user_id=data.get("reviewed_by_user_id"),
        reviewed_at=data.get("reviewed_at"),
        created_at=data.get("created_at"),
        updated_at=data.get("updated_at"),
    )


def _serialize_request(req: ChangeRequest) -> dict[str, Any]:
    """Serialize a change request to a dictionary."""
    data: dict[str, Any] = {
        "id": req.id,
        "project_id": req.project_id,
        "type": req.type.value,
        "status": req.status.value,
        "details": req.details,
        "requested_by_user_id": req.requested_by_user_id,
        "created_at": req.created_at,
        "updated_at": req.updated_at,
    }

    if req.details_ar:
        data["details_ar"] = req.details_ar
    if req.rejection_reason:
        data["rejection_reason"] = req.rejection_reason
    if req.reviewed_by_user_id is not None:
        data["reviewed_by_user_id"] = req.reviewed_by_user_id
    if req.reviewed_at:
        data["reviewed_at"] = req.reviewed_at

    return data
