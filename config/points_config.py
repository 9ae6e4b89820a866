# config/points_config.py

from enum import Enum


class ChallengeType(str, Enum):
    carbon    = "carbon"
    food      = "food"
    recycling = "recycling"
    shower    = "shower"


class TransportMode(str, Enum):
    bike   = "bike"
    walk   = "walk"
    public = "public"
    car    = "car"


class MealType(str, Enum):
    breakfast = "breakfast"
    lunch     = "lunch"
    dinner    = "dinner"
    snack     = "snack"


# ─── Transportation ─────────────────────────────────────────────────────────────
# Flat points per trip; car trips use CAR_BASE_POINTS - distance * CAR_PENALTY_PER_KM
TRANSPORT_POINTS = {
    TransportMode.bike:   10,
    TransportMode.walk:   10,
    TransportMode.public:  8,
}
CAR_BASE_POINTS     = 5
CAR_PENALTY_PER_KM  = 0.5
CAR_MIN_POINTS      = -10

# ─── Food ───────────────────────────────────────────────────────────────────────
# kg CO2e per unit quantity
FOOD_CATEGORY_WEIGHTS = {
    "meat":       2.5,
    "dairy":      1.5,
    "vegetables": 0.5,
    "fruits":     0.3,
}
FOOD_BASELINE_KG     = 20   # footprint at which the score reaches 0
FOOD_POINTS_PER_KG   = 5
FOOD_MAX_SCORE       = 100

# ─── Recycling ──────────────────────────────────────────────────────────────────
RECYCLING_POINTS = {
    "metal":   6,
    "plastic": 5,
    "paper":   4,
    "glass":   3,
}

# ─── Shower timer ───────────────────────────────────────────────────────────────
# (max minutes, points), checked in order
SHOWER_STEPS = (
    (5,  10),   # excellent
    (10,  8),   # good
    (15,  5),   # fair
)
SHOWER_LONG_POINTS    = 3
SHOWER_SKIPPED_POINTS = 3

# ─── Submission caps (applied when the score is persisted) ──────────────────────
SUBMISSION_SCORE_CAPS = {
    ChallengeType.recycling: 100,
}

# ─── Leveling ───────────────────────────────────────────────────────────────────
POINTS_PER_LEVEL_UNIT = 100
