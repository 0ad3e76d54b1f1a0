"""Recurrence pattern value object."""
import json
import logging
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)


class Frequency(str, Enum):
    """Unit a recurring task advances by."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"  # accepted when materializing, never projected


class RecurrencePattern(BaseModel):
    """Every ``interval`` ``frequency`` units, optionally at ``time``, until ``end_date``."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    frequency: Frequency
    interval: int = Field(default=1, ge=1)
    time: Optional[str] = Field(default=None, pattern=r"^([01]\d|2[0-3]):[0-5]\d$")  # HH:mm
    end_date: Optional[datetime] = Field(default=None, alias="endDate")

    @property
    def hour_minute(self) -> Optional[tuple]:
        if not self.time:
            return None
        hours, minutes = self.time.split(":")
        return int(hours), int(minutes)

    def to_json(self) -> str:
        return self.model_dump_json(exclude_none=True)


def parse_pattern(raw: Union[str, dict, RecurrencePattern, None]) -> Optional[RecurrencePattern]:
    """
    Parse a stored pattern blob.

    Args:
        raw: JSON string, dict, or an already parsed pattern

    Returns:
        The pattern, or None when it is missing or malformed
    """
    if raw is None or raw == "":
        return None
    if isinstance(raw, RecurrencePattern):
        return raw

    data: Any = raw
    if isinstance(raw, str):
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Ignoring unparseable recurrence pattern: {raw!r}")
            return None

    try:
        return RecurrencePattern.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Ignoring invalid recurrence pattern {raw!r}: {e.error_count()} error(s)")
        return None
