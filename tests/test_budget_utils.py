"""
Unit tests for budget calculation utilities.
"""
import pytest
from decimal import Decimal

from budget_utils import calculate_budget_status, effective_alert_percent


pytestmark = pytest.mark.unit


class TestCalculateBudgetStatus:
    """Tests for calculate_budget_status function."""

    def test_under_threshold(self):
        status = calculate_budget_status(Decimal('400.00'), Decimal('100.00'), 80)

        assert status['spent'] == Decimal('100.00')
        assert status['remaining'] == Decimal('300.00')
        assert status['percent_used'] == 25.0
        assert status['alert_reached'] is False

    def test_threshold_is_inclusive(self):
        status = calculate_budget_status('100', '80', 80)

        assert status['percent_used'] == 80.0
        assert status['alert_reached'] is True

    def test_overspent_has_negative_remaining(self):
        status = calculate_budget_status(50, 75, 90)

        assert status['remaining'] == Decimal('-25.00')
        assert status['percent_used'] == 150.0
        assert status['alert_reached'] is True

    def test_zero_budget_reports_zero_percent(self):
        status = calculate_budget_status(0, 40)

        assert status['percent_used'] == 0
        assert status['alert_reached'] is False
        assert status['remaining'] == Decimal('-40.00')

    @pytest.mark.parametrize('alert_percent', [None, 0])
    def test_unset_alert_defaults_to_80(self, alert_percent):
        assert calculate_budget_status(100, 79, alert_percent)['alert_reached'] is False
        assert calculate_budget_status(100, 80, alert_percent)['alert_reached'] is True


class TestEffectiveAlertPercent:

    def test_keeps_explicit_value(self):
        assert effective_alert_percent(50) == 50.0

    def test_default(self):
        assert effective_alert_percent(None) == 80.0
