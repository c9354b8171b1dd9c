"""Audit trail for catalog mutations."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..database.models import AuditLogModel, UserModel
from ..errors import InvalidAuditDetailError
from ..logging_manager import get_logger

logger = get_logger().getChild("services.audit")


class AuditChanges(BaseModel):
    model_config = ConfigDict(extra="forbid")

    before: Dict[str, Any]
    after: Dict[str, Any]


class AuditDetail(BaseModel):
    """Structured detail stored with every audit entry."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    entity: StrictStr = Field(min_length=1)
    action: Literal["create", "update", "delete"]
    target_id: Optional[StrictInt] = Field(default=None, alias="targetId")
    data: Optional[Dict[str, Any]] = None
    changes: Optional[AuditChanges] = None


AuditDetailInput = Union[AuditDetail, Mapping[str, Any]]


@dataclass(frozen=True)
class AuditEntry:
    id: int
    user_id: int
    user_email: Optional[str]
    action_type: str
    detail: Dict[str, Any]
    created_at: datetime


class AuditRecorder:
    """Validate audit details and add them to the caller's transaction.

    A rejected detail raises :class:`InvalidAuditDetailError`; the caller's
    transaction must then be rolled back along with the mutation it describes.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def record(
        self,
        actor_id: int,
        action_type: str,
        detail: AuditDetailInput,
    ) -> AuditLogModel:
        validated = self._validate(action_type, detail)
        entry = AuditLogModel(
            user_id=actor_id,
            action_type=action_type,
            detail=validated.model_dump_json(by_alias=True, exclude_none=True),
        )
        self._session.add(entry)
        self._session.flush()
        logger.info(
            "Recorded audit entry",
            extra={
                "event": "audit.recorded",
                "attributes": {
                    "audit_id": entry.id,
                    "actor_id": actor_id,
                    "action_type": action_type,
                    "target_id": validated.target_id,
                },
            },
        )
        return entry

    def list_entries(self, limit: int = 100) -> List[AuditEntry]:
        rows = self._session.execute(
            select(AuditLogModel, UserModel.email)
            .outerjoin(UserModel, UserModel.id == AuditLogModel.user_id)
            .order_by(AuditLogModel.created_at.desc(), AuditLogModel.id.desc())
            .limit(limit)
        ).all()
        return [
            AuditEntry(
                id=row.id,
                user_id=row.user_id,
                user_email=email,
                action_type=row.action_type,
                detail=json.loads(row.detail),
                created_at=row.created_at,
            )
            for row, email in rows
        ]

    @staticmethod
    def _validate(action_type: str, detail: AuditDetailInput) -> AuditDetail:
        if isinstance(detail, AuditDetail):
            detail = detail.model_dump(by_alias=True, exclude_none=True)
        try:
            if not action_type or len(action_type) > 50:
                raise ValueError("action type must be 1-50 characters")
            return AuditDetail.model_validate(detail)
        except ValueError as exc:  # pydantic.ValidationError included
            logger.error(
                "Rejected audit detail",
                extra={
                    "event": "audit.rejected",
                    "attributes": {"action_type": action_type, "error": str(exc)},
                },
            )
            raise InvalidAuditDetailError() from exc


__all__ = ["AuditChanges", "AuditDetail", "AuditEntry", "AuditRecorder"]
