"""Commercial solar savings calculator."""

from .config import (
    CalculatorConfig,
    DEFAULT_CONFIG,
    DEFAULT_INPUTS,
    FINANCING_LABELS
)

from .models import (
    FinancingType,
    CalculatorInputs,
    CalculatorResults,
    CashFinancing,
    LoanFinancing,
    PPAFinancing,
    calculator_context
)

from .validation import validate_calculator_inputs

from .solar_calcs import (
    calculate_system_size,
    calculate_annual_production,
    calculate_baseline_annual_bill,
    calculate_solar_bill,
    calculate_system_cost,
    calculate_net_system_cost,
    calculate_annual_om_cost,
    calculate_co2_offset,
    calculate_loan_payment,
    calculate_ppa_costs,
    calculate_financing,
    calculate_simple_payback,
    calculate_twenty_five_year_npv,
    calculate_solar_savings,
    build_savings_projection
)

from .api_calls import (
    get_nrel_production_factor,
    suggest_production_factor
)

from .contacts import (
    Topic,
    TOPIC_LABELS,
    ContactSubmissionData,
    ContactSubmission,
    ContactRepository,
    MemoryContactRepository,
    SQLiteContactRepository,
    ContactFormState,
    get_contact_repository,
    submit_contact_form
)
