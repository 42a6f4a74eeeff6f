from dataclasses import replace

import pytest

from solar_calculator.config import CalculatorConfig
from solar_calculator.models import CalculatorInputs, FinancingType
from solar_calculator.validation import validate_calculator_inputs


@pytest.fixture
def valid_inputs():
    return CalculatorInputs(
        monthly_usage_kwh=1000,
        utility_rate_per_kwh=0.12,
        desired_offset_percent=80,
        production_factor=1500,
        financing_type=FinancingType.CASH,
        itc_rate=0.30,
    )


def test_valid_inputs(valid_inputs):
    assert validate_calculator_inputs(valid_inputs) == []


@pytest.mark.parametrize("changes, message", [
    ({'monthly_usage_kwh': 0}, 'Monthly usage must be greater than 0'),
    ({'utility_rate_per_kwh': -0.1}, 'Utility rate must be greater than 0'),
    ({'desired_offset_percent': 150}, 'Desired offset must be between 0% and 100%'),
    ({'desired_offset_percent': -1}, 'Desired offset must be between 0% and 100%'),
    ({'production_factor': 500}, 'Production factor must be between 1200 and 1900'),
    ({'production_factor': 2000}, 'Production factor must be between 1200 and 1900'),
    ({'itc_rate': 1.5}, 'ITC rate must be between 0% and 100%'),
    ({'include_battery': True, 'battery_size_kwh': 0},
     'Battery size must be specified when including battery storage'),
    ({'include_battery': True}, 'Battery size must be specified when including battery storage'),
    ({'demand_charge_per_kw_month': -5}, 'Demand charge cannot be negative'),
])
def test_single_violation(valid_inputs, changes, message):
    assert validate_calculator_inputs(replace(valid_inputs, **changes)) == [message]


def test_boundaries_are_valid(valid_inputs):
    for changes in (
        {'desired_offset_percent': 0},
        {'desired_offset_percent': 100},
        {'production_factor': 1200},
        {'production_factor': 1900},
        {'itc_rate': 0},
        {'itc_rate': 1},
        {'demand_charge_per_kw_month': 0},
    ):
        assert validate_calculator_inputs(replace(valid_inputs, **changes)) == []


def test_battery_size_without_flag_is_ignored(valid_inputs):
    assert validate_calculator_inputs(replace(valid_inputs, battery_size_kwh=0)) == []


def test_all_violations_collected_in_order(valid_inputs):
    inputs = replace(
        valid_inputs,
        monthly_usage_kwh=0,
        utility_rate_per_kwh=0,
        desired_offset_percent=120,
        production_factor=100,
        itc_rate=-0.1,
        include_battery=True,
    )
    assert validate_calculator_inputs(inputs) == [
        'Monthly usage must be greater than 0',
        'Utility rate must be greater than 0',
        'Desired offset must be between 0% and 100%',
        'Production factor must be between 1200 and 1900',
        'ITC rate must be between 0% and 100%',
        'Battery size must be specified when including battery storage',
    ]


def test_production_factor_bounds_from_config(valid_inputs):
    config = CalculatorConfig(min_production_factor=800, max_production_factor=1400)
    errors = validate_calculator_inputs(valid_inputs, config)
    assert errors == ['Production factor must be between 800 and 1400']
