"""
Calculator assumptions for commercial solar savings estimates.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class CalculatorConfig:
    """Cost, performance and financing assumptions used by every engine."""
    # System costs
    system_cost_per_watt: float = 1.75  # $/W AC installed
    battery_cost_per_kwh: float = 800.0  # $/kWh

    # System performance
    annual_degradation_rate: float = 0.005  # 0.5% per year
    default_production_factor: float = 1500.0  # kWh/kW/year
    min_production_factor: float = 1200.0
    max_production_factor: float = 1900.0

    # Operations & maintenance
    om_cost_per_kw_year: float = 15.0  # $/kW/year

    # Grid emissions (lbs CO2/kWh, national average)
    grid_emissions_factor: float = 0.85
    lbs_per_ton: float = 2000.0

    # Financing
    loan_term_years: int = 20
    loan_interest_rate: float = 0.065
    ppa_rate_discount: float = 0.7  # PPA rate is typically 60-80% of utility rate
    ppa_escalation_rate: float = 0.02

    # Investment Tax Credit
    default_itc_rate: float = 0.30

    # System sizing (kW)
    min_system_size: float = 1.0
    max_system_size: float = 1000.0

    # NPV analysis
    analysis_period_years: int = 25
    npv_discount_rate: float = 0.08

    # Demand charge heuristic: peak kW = daily average kWh * multiplier
    demand_peak_multiplier: float = 1.2
    days_per_month: float = 30.0


DEFAULT_CONFIG = CalculatorConfig()

# Initial values for the calculator form
DEFAULT_INPUTS = {
    'monthly_usage_kwh': 1000.0,
    'utility_rate_per_kwh': 0.12,
    'demand_charge_per_kw_month': 15.0,
    'desired_offset_percent': 80.0,
    'production_factor': DEFAULT_CONFIG.default_production_factor,
    'financing_type': 'cash',
    'itc_rate': DEFAULT_CONFIG.default_itc_rate,
    'include_battery': False,
    'battery_size_kwh': 20.0,
}

FINANCING_LABELS = {
    'cash': 'Cash Purchase',
    'loan': 'Solar Loan',
    'ppa': 'Power Purchase Agreement (PPA)',
}
