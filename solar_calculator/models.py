"""
Value objects passed into and returned from the savings calculator.
"""

import json
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Optional, Union


class FinancingType(str, Enum):
    """How the customer pays for the system."""
    CASH = 'cash'
    LOAN = 'loan'
    PPA = 'ppa'


@dataclass(frozen=True)
class CalculatorInputs:
    """User-supplied inputs for a single calculation."""
    monthly_usage_kwh: float
    utility_rate_per_kwh: float
    desired_offset_percent: float
    production_factor: float
    financing_type: FinancingType
    itc_rate: float
    demand_charge_per_kw_month: Optional[float] = None
    include_battery: bool = False
    battery_size_kwh: Optional[float] = None

    def __post_init__(self):
        # Accept plain strings from form widgets
        if not isinstance(self.financing_type, FinancingType):
            object.__setattr__(self, 'financing_type', FinancingType(self.financing_type))


@dataclass(frozen=True)
class CashFinancing:
    """Customer owns the system outright."""

    @property
    def financing_type(self) -> FinancingType:
        return FinancingType.CASH


@dataclass(frozen=True)
class LoanFinancing:
    """Net system cost financed with a fixed-rate amortizing loan."""
    monthly_payment: float

    @property
    def financing_type(self) -> FinancingType:
        return FinancingType.LOAN


@dataclass(frozen=True)
class PPAFinancing:
    """Third-party owned system; customer buys its output per kWh."""
    ppa_rate_per_kwh: float
    ppa_annual_cost: float
    ppa_savings: float = 0.0

    @property
    def financing_type(self) -> FinancingType:
        return FinancingType.PPA


FinancingDetails = Union[CashFinancing, LoanFinancing, PPAFinancing]


@dataclass(frozen=True)
class CalculatorResults:
    """Sizing, financial and environmental results for one set of inputs."""
    system_size_kw: float
    annual_production_kwh: float
    system_cost: float
    net_system_cost: float  # After ITC
    annual_savings: float
    simple_payback_years: Optional[float]  # None when the system never pays back
    twenty_five_year_npv: float
    co2_offset_tons: float
    financing: FinancingDetails
    baseline_annual_bill: float
    solar_annual_bill: float
    annual_om_cost: float

    @property
    def pays_back(self) -> bool:
        return self.simple_payback_years is not None

    @property
    def financing_type(self) -> FinancingType:
        return self.financing.financing_type

    @property
    def monthly_payment(self) -> Optional[float]:
        return getattr(self.financing, 'monthly_payment', None)

    @property
    def ppa_rate_per_kwh(self) -> Optional[float]:
        return getattr(self.financing, 'ppa_rate_per_kwh', None)

    @property
    def ppa_annual_cost(self) -> Optional[float]:
        return getattr(self.financing, 'ppa_annual_cost', None)

    @property
    def ppa_savings(self) -> Optional[float]:
        return getattr(self.financing, 'ppa_savings', None)

    def to_dict(self) -> dict:
        """
        Flatten results into a plain dict.

        Financing fields are only included for the matching financing type.
        """
        data = {
            'system_size_kw': self.system_size_kw,
            'annual_production_kwh': self.annual_production_kwh,
            'system_cost': self.system_cost,
            'net_system_cost': self.net_system_cost,
            'annual_savings': self.annual_savings,
            'simple_payback_years': self.simple_payback_years,
            'twenty_five_year_npv': self.twenty_five_year_npv,
            'co2_offset_tons': self.co2_offset_tons,
            'financing_type': self.financing_type.value,
            'baseline_annual_bill': self.baseline_annual_bill,
            'solar_annual_bill': self.solar_annual_bill,
            'annual_om_cost': self.annual_om_cost,
        }
        data.update(asdict(self.financing))
        return data


def calculator_context(inputs: CalculatorInputs, results: CalculatorResults) -> str:
    """
    Serialize a calculation for attaching to a contact request.

    Args:
        inputs: Inputs used for the calculation
        results: Results of the calculation

    Returns:
        JSON string with the inputs and flattened results
    """
    input_data = asdict(inputs)
    input_data['financing_type'] = inputs.financing_type.value
    return json.dumps({'inputs': input_data, 'results': results.to_dict()}, sort_keys=True)
