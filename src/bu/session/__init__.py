"""Session state persistence for bu."""

from bu.session.data_models import SessionState
from bu.session.manager import StateManager

__all__ = ["SessionState", "StateManager"]
