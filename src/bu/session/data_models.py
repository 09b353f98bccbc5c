"""
Session state models for bu.

Pydantic models persisting the loaded utilities between CLI invocations.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from bu.core.datamodels import CommandInfo


class SessionState(BaseModel):
    """Loaded utilities and the commands attributed to each."""

    loaded: dict[str, list[CommandInfo]] = Field(default_factory=dict)
    updated_at: str = Field(default_factory=lambda: datetime.now().isoformat())

    def touch(self) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = datetime.now().isoformat()
