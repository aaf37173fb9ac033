"""Admin activity log schemas."""

import uuid
from datetime import datetime
from typing import Any

from pydantic import ConfigDict

from portfolio_api.schemas.danger_zone import CamelModel


class ActivityLogEntry(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    action_type: str
    description: str
    user_identifier: str | None
    details: dict[str, Any] | None
    timestamp: datetime


class ActivityLogResponse(CamelModel):
    entries: list[ActivityLogEntry]
    count: int
