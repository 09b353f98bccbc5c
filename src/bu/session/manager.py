"""
State manager for bu.

Keeps the loaded set of a registry in a JSON file so that consecutive
``bu`` invocations behave like one session.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from bu.core.registry import UtilityRegistry
from bu.session.data_models import SessionState

logger = logging.getLogger(__name__)


class StateManager:
    """Loads and saves the session state file."""

    def __init__(self, state_file: Path):
        self.state_file = Path(state_file).expanduser()

    def load(self) -> SessionState:
        """Read the state file, returning an empty state when absent or invalid."""
        if not self.state_file.exists():
            return SessionState()
        try:
            data = json.loads(self.state_file.read_text())
            return SessionState.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Invalid state file {self.state_file} ({e}), starting empty")
            return SessionState()

    def save(self, state: SessionState) -> Path:
        """Write the state file."""
        state.touch()
        self.state_file.parent.mkdir(parents=True, exist_ok=True)
        self.state_file.write_text(state.model_dump_json(indent=2) + "\n")
        return self.state_file

    def restore(self, registry: UtilityRegistry) -> SessionState:
        """Bring a fresh registry back to the saved loaded set."""
        state = self.load()
        if state.loaded:
            logger.debug(f"Restoring utilities: {', '.join(state.loaded)}")
            registry.restore(state.loaded)
        return state

    def persist(self, registry: UtilityRegistry) -> Path:
        """Save the registry's current loaded set."""
        return self.save(SessionState(loaded=registry.snapshot()))

    def clear(self) -> None:
        if self.state_file.exists():
            self.state_file.unlink()
