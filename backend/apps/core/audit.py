from __future__ import annotations

import hashlib
import json
from typing import Any, Dict, Iterable, Optional

from django.utils import timezone

from .auth import Principal
from .models import AuditLog


def _digest(prev_hash: str, role: str, user_id, action: str, target_type: str, target_id: str, data: Dict[str, Any]) -> str:
    body = json.dumps(data, sort_keys=True, default=str)
    payload = f"{prev_hash}|{role}|{user_id}|{action}|{target_type}|{target_id}|{body}"
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def record_action(
    principal: Optional[Principal],
    action: str,
    target_type: str,
    target_id,
    data: Optional[Dict[str, Any]] = None,
    ip: Optional[str] = None,
) -> AuditLog:
    target_id = str(target_id)
    data = data or {}
    role = principal.role if principal else ""
    user_id = principal.user_id if principal else None
    prev = AuditLog.objects.filter(target_type=target_type, target_id=target_id).order_by("-timestamp", "-id").first()
    prev_hash = prev.hash if prev else ""
    return AuditLog.objects.create(
        actor_user_id=user_id,
        actor_role=role,
        action=action,
        target_type=target_type,
        target_id=target_id,
        timestamp=timezone.now(),
        ip=ip,
        data=data,
        prev_hash=prev_hash,
        hash=_digest(prev_hash, role, user_id, action, target_type, target_id, data),
    )


def entries_for(target_type: str, target_id) -> Iterable[AuditLog]:
    return AuditLog.objects.filter(target_type=target_type, target_id=str(target_id)).order_by("timestamp", "id")


def verify_chain(target_type: str, target_id) -> bool:
    prev_hash = ""
    for row in entries_for(target_type, target_id):
        expected = _digest(
            prev_hash, row.actor_role, row.actor_user_id, row.action, row.target_type, row.target_id, row.data
        )
        if row.prev_hash != prev_hash or row.hash != expected:
            return False
        prev_hash = row.hash
    return True
