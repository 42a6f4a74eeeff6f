"""
Input validation for the savings calculator.
"""

import logging
from typing import List

from .config import CalculatorConfig, DEFAULT_CONFIG
from .models import CalculatorInputs

logger = logging.getLogger(__name__)


def validate_calculator_inputs(
    inputs: CalculatorInputs,
    config: CalculatorConfig = DEFAULT_CONFIG
) -> List[str]:
    """
    Check calculator inputs against their allowed ranges.

    Every check runs; all violations are returned so the form can show
    them together.

    Args:
        inputs: Inputs to check
        config: Assumptions providing the production factor bounds

    Returns:
        List of human-readable error messages (empty when inputs are valid)
    """
    errors = []

    if inputs.monthly_usage_kwh <= 0:
        errors.append('Monthly usage must be greater than 0')

    if inputs.utility_rate_per_kwh <= 0:
        errors.append('Utility rate must be greater than 0')

    if inputs.desired_offset_percent < 0 or inputs.desired_offset_percent > 100:
        errors.append('Desired offset must be between 0% and 100%')

    if (inputs.production_factor < config.min_production_factor
            or inputs.production_factor > config.max_production_factor):
        errors.append(
            f'Production factor must be between {config.min_production_factor:g} '
            f'and {config.max_production_factor:g}'
        )

    if inputs.itc_rate < 0 or inputs.itc_rate > 1:
        errors.append('ITC rate must be between 0% and 100%')

    if inputs.include_battery and (not inputs.battery_size_kwh or inputs.battery_size_kwh <= 0):
        errors.append('Battery size must be specified when including battery storage')

    if (inputs.demand_charge_per_kw_month is not None
            and inputs.demand_charge_per_kw_month < 0):
        errors.append('Demand charge cannot be negative')

    if errors:
        logger.debug("Calculator inputs rejected: %s", errors)

    return errors
