"""Match domain services: questions, room registry, state machine, timers.

This package contains the per-room game logic that socket handlers and
HTTP routes call into, keeping transport concerns separated from the
match rules.
"""

from .machine import MatchStateMachine
from .questions import generate_question
from .registry import RoomRegistry

__all__ = ['MatchStateMachine', 'RoomRegistry', 'generate_question']
