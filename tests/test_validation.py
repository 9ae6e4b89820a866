"""Tests for submission and free-text validation."""
import pytest

from config.points_config import TransportMode
from scoring.errors import SubmissionValidationError
from scoring.payloads import (
    CarbonPayload,
    FoodItem,
    FoodPayload,
    RecyclingItem,
    RecyclingPayload,
    ShowerPayload,
    Trip,
)
from scoring.validation import (
    check_recycling_daily_cap,
    check_shower_daily_cap,
    validate_challenge_title,
    validate_crew_description,
    validate_crew_name,
    validate_display_name,
    validate_payload,
)


class TestMinimumContent:
    @pytest.mark.parametrize(
        "payload,reason",
        [
            (CarbonPayload(), "Please add at least one trip"),
            (FoodPayload(), "Please add at least one food item"),
            (RecyclingPayload(items=[RecyclingItem(category="metal", quantity=0)]), "Please add at least one recycling item"),
            (ShowerPayload(), "Please record a shower time or mark as skipped"),
            (ShowerPayload(duration_minutes=0), "Please record a shower time or mark as skipped"),
        ],
    )
    def test_rejections(self, payload, reason):
        with pytest.raises(SubmissionValidationError) as exc:
            validate_payload(payload)
        assert exc.value.reason == reason
        assert exc.value.code == "INVALID_SUBMISSION"

    @pytest.mark.parametrize(
        "payload",
        [
            CarbonPayload(trips=[Trip(mode=TransportMode.walk, distance_km=1)]),
            FoodPayload(items=[FoodItem(name="Soup", category="vegetables", quantity=1)]),
            RecyclingPayload(items=[RecyclingItem(category="glass", quantity=1)]),
            ShowerPayload(duration_minutes=6),
            ShowerPayload(skipped=True),
        ],
    )
    def test_accepted(self, payload):
        validate_payload(payload)

    def test_unsupported_type(self):
        with pytest.raises(SubmissionValidationError):
            validate_payload({"type": "carbon"})


class TestDailyCaps:
    def test_fourth_shower_rejected(self):
        with pytest.raises(SubmissionValidationError) as exc:
            check_shower_daily_cap(ShowerPayload(duration_minutes=4), completed_today=3, skipped_today=0)
        assert exc.value.code == "DAILY_LIMIT_REACHED"

    def test_second_skip_rejected(self):
        with pytest.raises(SubmissionValidationError) as exc:
            check_shower_daily_cap(ShowerPayload(skipped=True), completed_today=0, skipped_today=1)
        assert "skip once per day" in exc.value.reason

    def test_skip_allowed_after_three_showers(self):
        check_shower_daily_cap(ShowerPayload(skipped=True), completed_today=3, skipped_today=0)

    def test_recycling_cap(self):
        payload = RecyclingPayload(items=[RecyclingItem(category="paper", quantity=6)])
        with pytest.raises(SubmissionValidationError) as exc:
            check_recycling_daily_cap(payload, items_today=95, limit=100)
        assert "5 remaining" in exc.value.reason
        check_recycling_daily_cap(payload, items_today=94, limit=100)


class TestTextFields:
    def test_display_name(self):
        assert validate_display_name("  Al ") == "Al"
        with pytest.raises(SubmissionValidationError) as exc:
            validate_display_name("A")
        assert exc.value.code == "INVALID_FIELD"
        with pytest.raises(SubmissionValidationError):
            validate_display_name("x" * 51)

    def test_crew_name(self):
        assert validate_crew_name("Eco") == "Eco"
        with pytest.raises(SubmissionValidationError):
            validate_crew_name("Ec")

    def test_optional_description(self):
        assert validate_crew_description(None) == ""
        assert validate_crew_description("   ") == ""
        with pytest.raises(SubmissionValidationError):
            validate_crew_description("too short")

    def test_challenge_title(self):
        with pytest.raises(SubmissionValidationError):
            validate_challenge_title("  ")
