from . import rules


def count_words(text: str) -> int:
    return len(str(text or "").split())


def _significant_words(text: str) -> set[str]:
    return {
        token
        for token in str(text or "").lower().split()
        if len(token) > rules.MIN_SIGNIFICANT_WORD_LENGTH
    }


def is_repetitive(current: str, previous: str) -> bool:
    """
    True when the user keeps circling: the current utterance shares more than
    REPETITION_OVERLAP_THRESHOLD long words with the previous one.
    """
    if not previous:
        return False

    overlap = _significant_words(current) & _significant_words(previous)
    return len(overlap) > rules.REPETITION_OVERLAP_THRESHOLD


def is_long_message(word_count: int) -> bool:
    return int(word_count or 0) > rules.LONG_MESSAGE_WORD_THRESHOLD
