"""
Tests for the full booking validation flow and the rule inspection helpers.
"""

from datetime import date

import pytest

from factories import make_booking, make_config, make_stay_rule, make_window_rule, sample
from stayrules.schemas.stay_rule import TriggerCondition
from stayrules.services.stay_rule_engine import (
    get_applicable_rules_for_period,
    get_validation_summary,
    has_active_rules,
    validate_booking,
)


class TestScenarios:

    def test_disabled_config_uses_defaults(self):
        config = make_config(enabled=False, min_stay=1, min_advance_booking=0, last_minute_booking=True)
        booking = make_booking(check_in=date(2024, 5, 10), check_out=date(2024, 5, 12), booking_date=date(2024, 5, 7))

        result = validate_booking(booking, config)

        assert result.is_valid is True
        assert result.errors == []
        assert result.applied_rules.stay_rule is None
        assert result.applied_rules.window_rule is None

    def test_seasonal_minimum_stay(self):
        rule = make_stay_rule("holidays", min_stay=3, priority=10)
        booking = make_booking(check_in=date(2024, 12, 30), check_out=date(2025, 1, 1))

        result = validate_booking(booking, make_config(stay_rules=[rule]))

        assert result.is_valid is False
        assert "Required: 3 nights, Requested: 2 nights" in result.errors[0]
        assert result.applied_rules.stay_rule == rule
        assert result.requirements.min_stay == 3

    def test_same_day_blocked_by_window_rule(self):
        rule = make_window_rule(min_advance_booking=2, last_minute_booking=False)
        booking = make_booking(check_in=date(2024, 12, 28), check_out=date(2024, 12, 30), booking_date=date(2024, 12, 28))

        result = validate_booking(booking, make_config(window_rules=[rule]))

        assert result.is_valid is False
        assert "Same-day bookings are not allowed for this period" in result.errors
        assert not any("Minimum advance booking" in e for e in result.errors)
        assert result.applied_rules.window_rule == rule

    def test_occupancy_rule_without_data_falls_back_to_defaults(self):
        rule = make_stay_rule(
            "busy",
            min_stay=5,
            trigger_type="occupancy",
            trigger_condition=TriggerCondition(occupancy_threshold=80),
        )
        booking = make_booking(check_in=date(2024, 12, 30), check_out=date(2025, 1, 1))

        result = validate_booking(booking, make_config(stay_rules=[rule], min_stay=1), occupancy=[])

        assert result.is_valid is True
        assert result.applied_rules.stay_rule is None
        assert result.requirements.min_stay == 1

    def test_equal_priority_tie_break(self):
        b = make_stay_rule("rule-b", priority=5, min_stay=2)
        a = make_stay_rule("rule-a", priority=5, min_stay=2)

        result = validate_booking(make_booking(), make_config(stay_rules=[b, a]))

        assert result.applied_rules.stay_rule.id == "rule-a"


class TestProperties:

    @pytest.fixture
    def config(self):
        return make_config(
            stay_rules=[make_stay_rule("s-low", priority=5, min_stay=2), make_stay_rule("s-high", priority=10, min_stay=4)],
            window_rules=[make_window_rule("w", min_advance_booking=3, max_advance_booking=180)],
        )

    def test_disabled_config_never_applies_rules(self, config):
        disabled = config.model_copy(update={"enabled": False})
        result = validate_booking(make_booking(), disabled)
        assert result.applied_rules.stay_rule is None
        assert result.applied_rules.window_rule is None
        assert result.requirements.min_stay == disabled.default_rules.min_stay

    def test_booking_within_resolved_bounds_is_valid(self, config):
        booking = make_booking(check_in=date(2024, 12, 28), check_out=date(2025, 1, 2), booking_date=date(2024, 12, 1))
        result = validate_booking(booking, config)
        assert result.is_valid is True
        assert result.errors == []
        assert result.applied_rules.stay_rule.id == "s-high"

    def test_families_resolve_independently(self, config):
        result = validate_booking(make_booking(), config)
        assert result.requirements.min_stay == 4
        assert result.requirements.min_advance_booking == 3
        assert result.requirements.max_advance_booking == 180
        assert result.requirements.max_stay is None

    def test_repeated_calls_are_identical(self, config):
        booking = make_booking(booking_date=date(2024, 12, 29))
        first = validate_booking(booking, config)
        second = validate_booking(booking, config)
        assert first == second
        assert first.model_dump_json() == second.model_dump_json()

    def test_demand_trigger_uses_occupancy_samples(self):
        rule = make_stay_rule("peak", min_stay=4, trigger_type="demand", trigger_condition=TriggerCondition(demand_level="high"))
        booking = make_booking(check_in=date(2024, 12, 30), check_out=date(2025, 1, 1))
        samples = [sample(date(2024, 12, 30), demand="high"), sample(date(2024, 12, 31), demand="high")]

        assert validate_booking(booking, make_config(stay_rules=[rule]), samples).applied_rules.stay_rule == rule
        assert validate_booking(booking, make_config(stay_rules=[rule]), []).applied_rules.stay_rule is None

    def test_result_serializes_with_camel_case_keys(self, config):
        data = validate_booking(make_booking(), config).model_dump(mode="json", by_alias=True)
        assert set(data) == {"isValid", "errors", "warnings", "appliedRules", "requirements"}
        assert data["appliedRules"]["stayRule"]["minStay"] == 4
        assert data["requirements"]["lastMinuteBooking"] is False


class TestInspection:

    def test_returns_all_overlapping_active_rules(self):
        config = make_config(
            stay_rules=[
                make_stay_rule("a", priority=1),
                make_stay_rule("b", priority=7),
                make_stay_rule("off", is_active=False),
                make_stay_rule("later", start_date=date(2025, 6, 1), end_date=date(2025, 6, 30)),
                make_stay_rule(
                    "busy",
                    priority=3,
                    trigger_type="occupancy",
                    trigger_condition=TriggerCondition(occupancy_threshold=99),
                ),
            ],
            window_rules=[make_window_rule("w")],
        )

        rules = get_applicable_rules_for_period(date(2024, 12, 24), date(2024, 12, 26), config)

        assert [r.id for r in rules.stay_rules] == ["b", "busy", "a"]
        assert [r.id for r in rules.window_rules] == ["w"]

    def test_nothing_in_period(self):
        config = make_config(stay_rules=[make_stay_rule()])
        rules = get_applicable_rules_for_period(date(2024, 3, 1), date(2024, 3, 5), config)
        assert rules.stay_rules == []
        assert rules.window_rules == []

    def test_has_active_rules(self):
        assert has_active_rules(make_config(stay_rules=[make_stay_rule()])) is True
        assert has_active_rules(make_config(stay_rules=[make_stay_rule()], enabled=False)) is False
        assert has_active_rules(make_config(stay_rules=[make_stay_rule(is_active=False)])) is False
        assert has_active_rules(make_config()) is False


class TestSummary:

    def test_valid_without_rules(self):
        result = validate_booking(make_booking(), make_config(enabled=False))
        assert get_validation_summary(result) == "Booking meets all requirements"

    def test_valid_with_rules_and_warnings(self):
        rule = make_window_rule(min_advance_booking=0, max_advance_booking=30, last_minute_booking=True)
        booking = make_booking(booking_date=date(2024, 12, 1))
        result = validate_booking(booking, make_config(window_rules=[rule]))
        assert get_validation_summary(result) == (
            "Booking meets all requirements (special rules applied). "
            "Warnings: This booking is quite far in advance - policies may change"
        )

    def test_invalid(self):
        result = validate_booking(make_booking(), make_config(stay_rules=[make_stay_rule(min_stay=3)]))
        assert get_validation_summary(result) == (
            "Booking cannot be processed: "
            "Minimum stay requirement not met. Required: 3 nights, Requested: 2 nights"
        )
