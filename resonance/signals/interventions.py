import re
from dataclasses import dataclass
from typing import Optional

from . import rules


@dataclass(frozen=True)
class FrequencyOffer:
    state: str
    hz: int
    description: str


def _compile_frequency_patterns():
    compiled = []
    for state, hz, description in rules.FREQUENCY_TABLE:
        # "432Hz" or "432 Hz", but never the tail of a longer number
        pattern = re.compile(rf"(?<!\d){hz} ?Hz")
        compiled.append((pattern, FrequencyOffer(state=state, hz=hz, description=description)))
    return tuple(compiled)


_FREQUENCY_PATTERNS = _compile_frequency_patterns()


def classify_intervention(reply_text: str) -> Optional[str]:
    """
    Map a generated reply to the physical exercise it asks for, if any.

    Only explicit instructions count. A reply that merely mentions a
    frequency ("Want some 432Hz?") never matches.
    """
    lower = str(reply_text or "").lower()
    if not lower:
        return None

    for category, clauses in rules.INTERVENTION_RULES:
        if any(all(phrase in lower for phrase in clause) for clause in clauses):
            return category
    return None


def classify_frequency_offer(reply_text: str) -> Optional[FrequencyOffer]:
    text = str(reply_text or "")
    if not text:
        return None

    for pattern, offer in _FREQUENCY_PATTERNS:
        if pattern.search(text):
            return offer
    return None
