# scoring/rules.py
"""
Scoring rules for each challenge type.

Every function here is pure: the same payload always yields the same float,
and no rounding is applied (that happens in scoring.formatting).
"""
import warnings
from collections import OrderedDict
from typing import Dict, Iterable, Optional

from config.points_config import (
    CAR_BASE_POINTS,
    CAR_MIN_POINTS,
    CAR_PENALTY_PER_KM,
    FOOD_BASELINE_KG,
    FOOD_CATEGORY_WEIGHTS,
    FOOD_MAX_SCORE,
    FOOD_POINTS_PER_KG,
    RECYCLING_POINTS,
    SHOWER_LONG_POINTS,
    SHOWER_SKIPPED_POINTS,
    SHOWER_STEPS,
    SUBMISSION_SCORE_CAPS,
    TRANSPORT_POINTS,
    ChallengeType,
    MealType,
    TransportMode,
)
from scoring.errors import UnknownCategoryWarning
from scoring.payloads import (
    CarbonPayload,
    FoodItem,
    FoodPayload,
    RecyclingItem,
    RecyclingPayload,
    ShowerPayload,
    Trip,
)

# Fallback emission factor for car trips without vehicle data (kg CO2e per km)
DEFAULT_CAR_EMISSION_FACTOR = 0.120
PUBLIC_TRANSIT_EMISSION_FACTOR = 0.040


def _category_weight(table: Dict[str, float], category: str, kind: str) -> float:
    weight = table.get(category.strip().lower())
    if weight is None:
        warnings.warn(
            f"Unknown {kind} category {category!r}; counted as 0",
            UnknownCategoryWarning,
            stacklevel=3,
        )
        return 0
    return weight


# ─── Transportation ─────────────────────────────────────────────────────────────

def trip_score(trip: Trip) -> float:
    if trip.mode == TransportMode.car:
        return max(CAR_MIN_POINTS, CAR_BASE_POINTS - trip.distance_km * CAR_PENALTY_PER_KM)
    return float(TRANSPORT_POINTS.get(trip.mode, 0))


def carbon_score(trips: Iterable[Trip]) -> float:
    """Unclamped sum over trips; heavy car use can go negative."""
    return sum((trip_score(t) for t in trips), 0.0)


def carbon_trip_footprint(trip: Trip, emission_factor: Optional[float] = None) -> float:
    """Estimated kg CO2e for one trip."""
    if trip.mode == TransportMode.car:
        factor = DEFAULT_CAR_EMISSION_FACTOR if emission_factor is None else emission_factor
        return trip.distance_km * factor
    if trip.mode == TransportMode.public:
        return trip.distance_km * PUBLIC_TRANSIT_EMISSION_FACTOR
    return 0.0


# ─── Food ───────────────────────────────────────────────────────────────────────

def food_item_footprint(item: FoodItem) -> float:
    return item.quantity * _category_weight(FOOD_CATEGORY_WEIGHTS, item.category, "food")


def food_footprint(items: Iterable[FoodItem]) -> float:
    """Total kg CO2e of a list of food items."""
    return sum((food_item_footprint(i) for i in items), 0.0)


def food_score(items: Iterable[FoodItem]) -> float:
    footprint = food_footprint(items)
    return min(FOOD_MAX_SCORE, max(0.0, (FOOD_BASELINE_KG - footprint) * FOOD_POINTS_PER_KG))


def meal_footprints(items: Iterable[FoodItem]) -> "OrderedDict[MealType, float]":
    """Footprint per meal type, in breakfast/lunch/dinner/snack order."""
    totals = OrderedDict((meal, 0.0) for meal in MealType)
    for item in items:
        totals[item.meal_type] += food_item_footprint(item)
    return totals


# ─── Recycling ──────────────────────────────────────────────────────────────────

def recycling_score(items: Iterable[RecyclingItem]) -> float:
    """Raw accumulator. The per-submission cap is applied by persisted_score()."""
    return sum(
        (item.quantity * _category_weight(RECYCLING_POINTS, item.category, "recycling") for item in items),
        0.0,
    )


# ─── Shower ─────────────────────────────────────────────────────────────────────

def shower_score(entry: ShowerPayload) -> float:
    if entry.skipped:
        return float(SHOWER_SKIPPED_POINTS)
    duration = entry.duration_minutes or 0
    for max_minutes, points in SHOWER_STEPS:
        if duration <= max_minutes:
            return float(points)
    return float(SHOWER_LONG_POINTS)


def shower_day_score(entries: Iterable[ShowerPayload]) -> float:
    return sum((shower_score(e) for e in entries), 0.0)


# ─── Dispatch ───────────────────────────────────────────────────────────────────

def score_payload(payload) -> float:
    """Raw score for any tagged payload."""
    if isinstance(payload, CarbonPayload):
        return carbon_score(payload.trips)
    if isinstance(payload, FoodPayload):
        return food_score(payload.items)
    if isinstance(payload, RecyclingPayload):
        return recycling_score(payload.items)
    if isinstance(payload, ShowerPayload):
        return shower_score(payload)
    raise TypeError(f"Unsupported payload type: {type(payload).__name__}")


def persisted_score(payload) -> float:
    """Score as stored on the submission record, with per-type caps applied."""
    raw = score_payload(payload)
    cap = SUBMISSION_SCORE_CAPS.get(ChallengeType(payload.type))
    if cap is not None:
        return min(cap, raw)
    return raw
