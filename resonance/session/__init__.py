from resonance.session.engine import SessionEngine
from resonance.session.registry import ConnectionContext, SessionRegistry, session_registry
from resonance.session.state import ReplySignals, SessionState, TurnUpdate

__all__ = [
    "SessionEngine",
    "ConnectionContext",
    "SessionRegistry",
    "session_registry",
    "ReplySignals",
    "SessionState",
    "TurnUpdate",
]
