"""Schemas for the audit log endpoint."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class AuditEntryPayload(BaseModel):
    id: int
    user_id: int
    user_email: Optional[str] = None
    action_type: str
    detail: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None


class AuditLogListResponse(BaseModel):
    entries: List[AuditEntryPayload] = Field(default_factory=list)
