from resonance.signals.interventions import FrequencyOffer, classify_frequency_offer, classify_intervention
from resonance.signals.speech import count_words, is_long_message, is_repetitive

__all__ = [
    "FrequencyOffer",
    "classify_frequency_offer",
    "classify_intervention",
    "count_words",
    "is_long_message",
    "is_repetitive",
]
