# resonance/core/state.py

from enum import Enum

class SessionPhase(str, Enum):
    GREETING = "greeting"
    ACTIVE = "active"
    INTERVENING = "intervening"
    CLOSED = "closed"
