"""
Sizing, cost, financing and environmental calculations for commercial solar.
Supports cash purchase, solar loan, and PPA scenarios.
"""

import logging
from typing import Callable, Optional, Tuple

import numpy as np
import pandas as pd

from .config import CalculatorConfig, DEFAULT_CONFIG
from .models import (
    CalculatorInputs,
    CalculatorResults,
    CashFinancing,
    FinancingDetails,
    FinancingType,
    LoanFinancing,
    PPAFinancing,
)

logger = logging.getLogger(__name__)


def calculate_system_size(
    monthly_usage_kwh: float,
    desired_offset_percent: float,
    production_factor: float,
    config: CalculatorConfig = DEFAULT_CONFIG
) -> float:
    """
    Size the system to cover the desired share of annual usage.

    Args:
        monthly_usage_kwh: Average monthly consumption (kWh)
        desired_offset_percent: Share of annual usage to cover (0-100)
        production_factor: Annual yield per installed kW (kWh/kW/year)
        config: Calculator assumptions

    Returns:
        System size in kW, clamped to the configured size bounds
    """
    annual_usage_kwh = monthly_usage_kwh * 12
    target_production_kwh = annual_usage_kwh * (desired_offset_percent / 100)
    system_size_kw = target_production_kwh / production_factor

    return max(config.min_system_size, min(config.max_system_size, system_size_kw))


def calculate_annual_production(
    system_size_kw: float,
    production_factor: float,
    year: int = 1,
    config: CalculatorConfig = DEFAULT_CONFIG
) -> float:
    """Annual production (kWh) in the given year, with panel degradation."""
    degradation_factor = (1 - config.annual_degradation_rate) ** (year - 1)
    return system_size_kw * production_factor * degradation_factor


def calculate_baseline_annual_bill(
    monthly_usage_kwh: float,
    utility_rate_per_kwh: float,
    demand_charge_per_kw_month: Optional[float] = None,
    config: CalculatorConfig = DEFAULT_CONFIG
) -> float:
    """
    Estimate the annual utility bill without solar.

    Args:
        monthly_usage_kwh: Average monthly consumption (kWh)
        utility_rate_per_kwh: Retail energy rate ($/kWh)
        demand_charge_per_kw_month: Optional demand charge ($/kW-month)
        config: Calculator assumptions

    Returns:
        Annual energy cost plus estimated demand charges ($)
    """
    annual_usage_kwh = monthly_usage_kwh * 12
    energy_cost = annual_usage_kwh * utility_rate_per_kwh

    demand_cost = 0.0
    if demand_charge_per_kw_month:
        # Peak demand approximated from the daily average, not metered data
        estimated_peak_kw = (monthly_usage_kwh / config.days_per_month) * config.demand_peak_multiplier
        demand_cost = estimated_peak_kw * demand_charge_per_kw_month * 12

    return energy_cost + demand_cost


def calculate_solar_bill(
    annual_usage_kwh: float,
    annual_production_kwh: float,
    utility_rate_per_kwh: float
) -> float:
    """Annual bill for usage not covered by solar. Excess production earns no credit."""
    net_usage_kwh = max(0.0, annual_usage_kwh - annual_production_kwh)
    return net_usage_kwh * utility_rate_per_kwh


def calculate_system_cost(
    system_size_kw: float,
    include_battery: bool = False,
    battery_size_kwh: Optional[float] = 0,
    config: CalculatorConfig = DEFAULT_CONFIG
) -> float:
    """
    Calculate installed system cost including optional battery storage.

    Args:
        system_size_kw: System size in kW
        include_battery: Whether battery storage is added
        battery_size_kwh: Battery capacity in kWh
        config: Calculator assumptions

    Returns:
        Gross system cost ($)
    """
    solar_cost = system_size_kw * 1000 * config.system_cost_per_watt

    battery_cost = 0.0
    if include_battery and battery_size_kwh and battery_size_kwh > 0:
        battery_cost = battery_size_kwh * config.battery_cost_per_kwh

    return solar_cost + battery_cost


def calculate_net_system_cost(system_cost: float, itc_rate: float) -> float:
    """System cost after the Investment Tax Credit."""
    itc_credit = system_cost * itc_rate
    return system_cost - itc_credit


def calculate_annual_om_cost(
    system_size_kw: float,
    config: CalculatorConfig = DEFAULT_CONFIG
) -> float:
    return system_size_kw * config.om_cost_per_kw_year


def calculate_co2_offset(
    annual_production_kwh: float,
    grid_emissions_factor: Optional[float] = None,
    config: CalculatorConfig = DEFAULT_CONFIG
) -> float:
    """
    Estimate avoided CO2 emissions.

    Args:
        annual_production_kwh: Annual solar production
        grid_emissions_factor: lbs CO2 per kWh (defaults to the configured grid average)
        config: Calculator assumptions

    Returns:
        CO2 offset in short tons per year
    """
    if grid_emissions_factor is None:
        grid_emissions_factor = config.grid_emissions_factor
    return (annual_production_kwh * grid_emissions_factor) / config.lbs_per_ton


def calculate_loan_payment(
    principal: float,
    annual_rate: float,
    term_years: int
) -> float:
    """
    Monthly payment for a fixed-rate amortizing loan.

    Args:
        principal: Loan amount
        annual_rate: Annual interest rate (e.g., 0.065 for 6.5%)
        term_years: Loan term in years

    Returns:
        Monthly payment ($)
    """
    monthly_rate = annual_rate / 12
    num_payments = term_years * 12

    if monthly_rate == 0:
        return principal / num_payments

    return principal * (
        monthly_rate * (1 + monthly_rate) ** num_payments
    ) / ((1 + monthly_rate) ** num_payments - 1)


def calculate_ppa_costs(
    annual_production_kwh: float,
    ppa_rate_per_kwh: float
) -> Tuple[float, float]:
    """
    Annual cost of buying the system's output under a PPA.

    Returns:
        Tuple of (annual PPA cost, PPA savings). Savings versus the utility
        are not modeled yet and are always 0.
    """
    annual_cost = annual_production_kwh * ppa_rate_per_kwh
    savings = 0.0
    return annual_cost, savings


def calculate_financing(
    financing_type: FinancingType,
    baseline_annual_bill: float,
    solar_annual_bill: float,
    annual_om_cost: float,
    net_system_cost: float,
    annual_production_kwh: float,
    utility_rate_per_kwh: float,
    config: CalculatorConfig = DEFAULT_CONFIG
) -> Tuple[FinancingDetails, float]:
    """
    Apply the selected financing option to the year-one savings.

    Args:
        financing_type: Cash, loan or PPA
        baseline_annual_bill: Annual bill without solar
        solar_annual_bill: Annual bill with solar
        annual_om_cost: Annual O&M cost of an owned system
        net_system_cost: System cost after ITC
        annual_production_kwh: Year-one production
        utility_rate_per_kwh: Retail energy rate
        config: Calculator assumptions

    Returns:
        Tuple of (financing details, annual savings)
    """
    owned_savings = baseline_annual_bill - solar_annual_bill - annual_om_cost

    if financing_type == FinancingType.LOAN:
        monthly_payment = calculate_loan_payment(
            net_system_cost,
            config.loan_interest_rate,
            config.loan_term_years
        )
        return LoanFinancing(monthly_payment=monthly_payment), owned_savings - monthly_payment * 12

    if financing_type == FinancingType.PPA:
        # Third party owns the system, so O&M and ITC don't reach the customer
        ppa_rate = utility_rate_per_kwh * config.ppa_rate_discount
        ppa_annual_cost, ppa_savings = calculate_ppa_costs(annual_production_kwh, ppa_rate)
        financing = PPAFinancing(
            ppa_rate_per_kwh=ppa_rate,
            ppa_annual_cost=ppa_annual_cost,
            ppa_savings=ppa_savings
        )
        return financing, baseline_annual_bill - ppa_annual_cost

    return CashFinancing(), owned_savings


def calculate_simple_payback(
    net_system_cost: float,
    annual_savings: float
) -> Optional[float]:
    """Years to recover the net cost, or None if savings never recover it."""
    if annual_savings > 0:
        return net_system_cost / annual_savings
    return None


def calculate_twenty_five_year_npv(
    annual_savings: float,
    net_system_cost: float,
    discount_rate: Optional[float] = None,
    cash_flow: Optional[Callable[[int], float]] = None,
    config: CalculatorConfig = DEFAULT_CONFIG
) -> float:
    """
    Net present value of the investment over the analysis period.

    Args:
        annual_savings: Savings used for every year when no cash_flow is given
        net_system_cost: Upfront cost after ITC
        discount_rate: Annual discount rate (defaults to the configured rate)
        cash_flow: Optional function mapping year (1-based) to that year's savings
        config: Calculator assumptions

    Returns:
        NPV in dollars
    """
    if discount_rate is None:
        discount_rate = config.npv_discount_rate

    years = np.arange(1, config.analysis_period_years + 1)
    if cash_flow is None:
        flows = np.full(len(years), annual_savings, dtype=float)
    else:
        flows = np.array([cash_flow(int(year)) for year in years], dtype=float)

    discount_factors = (1 + discount_rate) ** years
    return float(-net_system_cost + np.sum(flows / discount_factors))


def calculate_solar_savings(
    inputs: CalculatorInputs,
    config: CalculatorConfig = DEFAULT_CONFIG
) -> CalculatorResults:
    """
    Run the full savings calculation.

    Inputs must already have passed validate_calculator_inputs; nothing is
    re-checked here.

    Args:
        inputs: Validated calculator inputs
        config: Calculator assumptions

    Returns:
        CalculatorResults for the inputs
    """
    # System sizing
    system_size_kw = calculate_system_size(
        inputs.monthly_usage_kwh,
        inputs.desired_offset_percent,
        inputs.production_factor,
        config
    )
    annual_production_kwh = calculate_annual_production(
        system_size_kw, inputs.production_factor, config=config
    )

    # Bills and costs
    annual_usage_kwh = inputs.monthly_usage_kwh * 12
    baseline_annual_bill = calculate_baseline_annual_bill(
        inputs.monthly_usage_kwh,
        inputs.utility_rate_per_kwh,
        inputs.demand_charge_per_kw_month,
        config
    )
    solar_annual_bill = calculate_solar_bill(
        annual_usage_kwh, annual_production_kwh, inputs.utility_rate_per_kwh
    )
    system_cost = calculate_system_cost(
        system_size_kw, inputs.include_battery, inputs.battery_size_kwh, config
    )
    net_system_cost = calculate_net_system_cost(system_cost, inputs.itc_rate)
    annual_om_cost = calculate_annual_om_cost(system_size_kw, config)

    financing, annual_savings = calculate_financing(
        inputs.financing_type,
        baseline_annual_bill,
        solar_annual_bill,
        annual_om_cost,
        net_system_cost,
        annual_production_kwh,
        inputs.utility_rate_per_kwh,
        config
    )

    results = CalculatorResults(
        system_size_kw=system_size_kw,
        annual_production_kwh=annual_production_kwh,
        system_cost=system_cost,
        net_system_cost=net_system_cost,
        annual_savings=annual_savings,
        simple_payback_years=calculate_simple_payback(net_system_cost, annual_savings),
        twenty_five_year_npv=calculate_twenty_five_year_npv(
            annual_savings, net_system_cost, config=config
        ),
        co2_offset_tons=calculate_co2_offset(annual_production_kwh, config=config),
        financing=financing,
        baseline_annual_bill=baseline_annual_bill,
        solar_annual_bill=solar_annual_bill,
        annual_om_cost=annual_om_cost
    )

    logger.debug(
        "Calculated %s scenario: %.1f kW, savings $%.0f/yr, NPV $%.0f",
        inputs.financing_type.value, system_size_kw, annual_savings,
        results.twenty_five_year_npv
    )
    return results


def build_savings_projection(
    results: CalculatorResults,
    production_factor: float,
    config: CalculatorConfig = DEFAULT_CONFIG
) -> pd.DataFrame:
    """
    Year-by-year view of the flat savings series behind the NPV.

    Production is shown with degradation for reference only; savings are the
    same every year, matching twenty_five_year_npv.

    Args:
        results: Calculator results to project
        production_factor: Production factor the results were sized with
        config: Calculator assumptions

    Returns:
        DataFrame with one row per year of the analysis period
    """
    years = np.arange(1, config.analysis_period_years + 1)
    production = results.system_size_kw * production_factor * (
        (1 - config.annual_degradation_rate) ** (years - 1)
    )
    savings = np.full(len(years), results.annual_savings, dtype=float)
    discounted = savings / (1 + config.npv_discount_rate) ** years

    return pd.DataFrame({
        'year': years,
        'production_kwh': production,
        'annual_savings': savings,
        'discounted_savings': discounted,
        'cumulative_savings': -results.net_system_cost + np.cumsum(savings),
        'cumulative_npv': -results.net_system_cost + np.cumsum(discounted),
    })
