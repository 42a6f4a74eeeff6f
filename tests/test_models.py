import json
from dataclasses import FrozenInstanceError, replace

import pytest

from solar_calculator.models import CalculatorInputs, FinancingType, calculator_context
from solar_calculator.solar_calcs import calculate_solar_savings


@pytest.fixture
def inputs():
    return CalculatorInputs(
        monthly_usage_kwh=1000,
        utility_rate_per_kwh=0.12,
        desired_offset_percent=80,
        production_factor=1500,
        financing_type='cash',
        itc_rate=0.30,
    )


def test_financing_type_from_string(inputs):
    assert inputs.financing_type is FinancingType.CASH


def test_invalid_financing_type():
    with pytest.raises(ValueError):
        CalculatorInputs(1000, 0.12, 80, 1500, 'lease', 0.3)


def test_inputs_are_immutable(inputs):
    with pytest.raises(FrozenInstanceError):
        inputs.monthly_usage_kwh = 2000


def test_cash_dict_has_no_financing_fields(inputs):
    data = calculate_solar_savings(inputs).to_dict()

    assert data['financing_type'] == 'cash'
    for key in ('monthly_payment', 'ppa_rate_per_kwh', 'ppa_annual_cost', 'ppa_savings'):
        assert key not in data


def test_loan_dict(inputs):
    data = calculate_solar_savings(replace(inputs, financing_type=FinancingType.LOAN)).to_dict()

    assert data['financing_type'] == 'loan'
    assert data['monthly_payment'] > 0
    assert 'ppa_rate_per_kwh' not in data


def test_ppa_dict(inputs):
    data = calculate_solar_savings(replace(inputs, financing_type=FinancingType.PPA)).to_dict()

    assert data['financing_type'] == 'ppa'
    assert data['ppa_savings'] == 0
    assert data['ppa_annual_cost'] > 0
    assert 'monthly_payment' not in data


def test_calculator_context_round_trips_as_json(inputs):
    results = calculate_solar_savings(inputs)
    context = json.loads(calculator_context(inputs, results))

    assert context['inputs']['financing_type'] == 'cash'
    assert context['inputs']['monthly_usage_kwh'] == 1000
    assert context['results']['system_cost'] == pytest.approx(results.system_cost)


def test_calculator_context_never_payback(inputs):
    poor = replace(inputs, utility_rate_per_kwh=0.01, financing_type=FinancingType.LOAN)
    context = json.loads(calculator_context(poor, calculate_solar_savings(poor)))
    assert context['results']['simple_payback_years'] is None
