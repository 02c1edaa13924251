"""
All classification thresholds and rule tables live here.
Changing these changes what the agent reacts to.
"""

# Repetition / load detection
MIN_SIGNIFICANT_WORD_LENGTH = 4  # tokens must be strictly longer than this
REPETITION_OVERLAP_THRESHOLD = 5  # shared tokens must exceed this
LONG_MESSAGE_WORD_THRESHOLD = 100

# Hint budget
MAX_LOAD_HINTS = 1
MAX_SESSION_HINTS = 2
LONG_SESSION_SEC = 900

# Intervention categories
INTERVENTION_COLD_WATER = "cold_water"
INTERVENTION_MOVEMENT = "movement"
INTERVENTION_VAGAL = "vagal"
INTERVENTION_GROUNDING = "grounding"

# Ordered: first matching category wins. Each category lists alternative
# clauses; a clause matches when every phrase in it is present.
INTERVENTION_RULES: tuple[tuple[str, tuple[tuple[str, ...], ...]], ...] = (
    (INTERVENTION_COLD_WATER, (("cold water on your wrists",), ("go ", "cold"))),
    (INTERVENTION_MOVEMENT, (("shake", "hands"), ("jumping jacks",))),
    (INTERVENTION_VAGAL, (("hum with me",),)),
    (INTERVENTION_GROUNDING, (("lie down", "floor"),)),
)

# state -> (hz, description), checked in this order
FREQUENCY_TABLE: tuple[tuple[str, int, str], ...] = (
    ("anxiety", 432, "slows racing thoughts"),
    ("fear", 396, "grounds fear"),
    ("numb", 528, "gently wakes things up"),
    ("stuck", 417, "helps shift stuck feelings"),
    ("anger", 639, "settles frustration"),
)
