"""
Commercial Solar Savings Calculator
Streamlit application for estimating system size, cost, payback and
environmental impact, and for collecting proposal requests.
"""

import logging
import os

import streamlit as st
import plotly.graph_objects as go

from solar_calculator.config import DEFAULT_CONFIG, DEFAULT_INPUTS, FINANCING_LABELS
from solar_calculator.models import CalculatorInputs, FinancingType, calculator_context
from solar_calculator.validation import validate_calculator_inputs
from solar_calculator.solar_calcs import calculate_solar_savings, build_savings_projection
from solar_calculator.formatting import (
    format_currency,
    format_number,
    format_percentage,
    format_payback
)
from solar_calculator.api_calls import suggest_production_factor
from solar_calculator.contacts import (
    Topic,
    TOPIC_LABELS,
    get_contact_repository,
    submit_contact_form
)

# Page configuration
st.set_page_config(
    page_title="Solar Savings Calculator",
    page_icon="☀️",
    layout="wide",
    initial_sidebar_state="expanded"
)

logger = logging.getLogger(__name__)


def get_setting(name: str, default=None):
    """Read a setting from Streamlit secrets, then the environment."""
    try:
        return st.secrets[name]
    except (KeyError, FileNotFoundError):
        pass
    return os.environ.get(name, default)


@st.cache_resource
def configure_logging():
    level = str(get_setting("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )


@st.cache_resource
def load_contact_repository():
    """Shared lead store for all sessions."""
    db_path = get_setting("CONTACT_DB_PATH")
    if not db_path:
        logger.info("CONTACT_DB_PATH not set; contact submissions kept in memory")
    return get_contact_repository(db_path)


def initialize_session_state():
    """Initialize session state variables."""
    defaults = dict(DEFAULT_INPUTS)
    defaults.update({
        'page': 'calculator',
        'use_demand_charge': True,
        'calculator_context': None,
        'contact_topic': Topic.GENERAL.value,
    })
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value


def render_production_factor_lookup():
    """Optional PVWatts lookup that pre-fills the production factor."""
    with st.expander("Estimate production factor from site location"):
        col1, col2 = st.columns(2)
        with col1:
            latitude = st.number_input("Latitude", min_value=-90.0, max_value=90.0,
                                       value=39.74, step=0.01, format="%.4f")
        with col2:
            longitude = st.number_input("Longitude", min_value=-180.0, max_value=180.0,
                                        value=-104.99, step=0.01, format="%.4f")

        if st.button("🔍 Look up with NREL PVWatts", use_container_width=True):
            with st.spinner("Fetching solar resource data..."):
                factor = suggest_production_factor(
                    latitude, longitude, get_setting("NREL_API_KEY", "DEMO_KEY")
                )
            if factor is None:
                st.warning("Could not reach PVWatts. Enter a production factor manually.")
            else:
                st.session_state.production_factor = factor
                st.rerun()


def render_inputs() -> CalculatorInputs:
    """Render input widgets and build the calculator inputs."""
    st.subheader("⚡ Energy Usage")

    st.number_input(
        "Average Monthly Usage (kWh)",
        min_value=0.0,
        step=100.0,
        key='monthly_usage_kwh',
        help="Your average monthly electricity consumption"
    )
    st.number_input(
        "Utility Rate ($/kWh)",
        min_value=0.0,
        step=0.005,
        format="%.3f",
        key='utility_rate_per_kwh',
        help="Your current electricity rate per kWh"
    )
    use_demand_charge = st.checkbox("My bill includes demand charges", key='use_demand_charge')
    if use_demand_charge:
        st.number_input(
            "Demand Charge ($/kW-month)",
            min_value=0.0,
            step=1.0,
            key='demand_charge_per_kw_month'
        )

    st.subheader("☀️ System Design")

    st.slider(
        "Desired Offset (%)",
        min_value=0.0,
        max_value=100.0,
        step=5.0,
        key='desired_offset_percent',
        help="Share of your annual usage the system should cover"
    )
    # Lookup must run before the widget it pre-fills is created
    render_production_factor_lookup()
    st.number_input(
        "Production Factor (kWh/kW/year)",
        min_value=0.0,
        step=10.0,
        key='production_factor',
        help=(
            f"Site-specific annual yield, typically "
            f"{DEFAULT_CONFIG.min_production_factor:,.0f}-"
            f"{DEFAULT_CONFIG.max_production_factor:,.0f}"
        )
    )

    include_battery = st.toggle("Include battery storage", key='include_battery')
    if include_battery:
        st.number_input(
            "Battery Size (kWh)",
            min_value=0.0,
            step=5.0,
            key='battery_size_kwh'
        )

    st.subheader("💰 Financing")

    st.radio(
        "Financing Type",
        options=[t.value for t in FinancingType],
        format_func=lambda x: FINANCING_LABELS[x],
        horizontal=True,
        key='financing_type'
    )
    itc_percent = st.slider(
        "Investment Tax Credit (%)",
        min_value=0,
        max_value=100,
        value=int(round(st.session_state.itc_rate * 100)),
        help="Federal ITC applied to the gross system cost"
    )
    st.session_state.itc_rate = itc_percent / 100

    return CalculatorInputs(
        monthly_usage_kwh=st.session_state.monthly_usage_kwh,
        utility_rate_per_kwh=st.session_state.utility_rate_per_kwh,
        demand_charge_per_kw_month=(
            st.session_state.demand_charge_per_kw_month if use_demand_charge else None
        ),
        desired_offset_percent=st.session_state.desired_offset_percent,
        production_factor=st.session_state.production_factor,
        financing_type=st.session_state.financing_type,
        itc_rate=st.session_state.itc_rate,
        include_battery=include_battery,
        battery_size_kwh=st.session_state.battery_size_kwh if include_battery else None
    )


def render_results(inputs: CalculatorInputs):
    """Calculate and display results for valid inputs."""
    results = calculate_solar_savings(inputs)

    col1, col2, col3 = st.columns(3)
    col1.metric("System Size", f"{format_number(results.system_size_kw, 1)} kW")
    col2.metric("Annual Production", f"{format_number(results.annual_production_kwh)} kWh")
    col3.metric("CO₂ Offset", f"{format_number(results.co2_offset_tons, 1)} tons/yr")

    col1, col2, col3 = st.columns(3)
    col1.metric("System Cost", format_currency(results.system_cost))
    col2.metric(
        "Net Cost After ITC",
        format_currency(results.net_system_cost),
        help=f"After {format_percentage(inputs.itc_rate)} Investment Tax Credit"
    )
    col3.metric("Annual Savings", format_currency(results.annual_savings))

    col1, col2 = st.columns(2)
    col1.metric("Simple Payback", format_payback(results.simple_payback_years))
    col2.metric("25-Year NPV", format_currency(results.twenty_five_year_npv))

    if not results.pays_back:
        st.warning("Annual savings are not positive, so this scenario never pays back.")

    st.divider()

    # Financing-specific details
    st.subheader(f"📋 {FINANCING_LABELS[results.financing_type.value]}")
    if results.financing_type == FinancingType.LOAN:
        st.metric("Monthly Loan Payment", format_currency(results.monthly_payment))
        st.caption(
            f"{DEFAULT_CONFIG.loan_term_years}-year term at "
            f"{format_percentage(DEFAULT_CONFIG.loan_interest_rate, 1)} on the net system cost"
        )
    elif results.financing_type == FinancingType.PPA:
        col1, col2 = st.columns(2)
        col1.metric("PPA Rate", f"${results.ppa_rate_per_kwh:.3f}/kWh")
        col2.metric("Annual PPA Cost", format_currency(results.ppa_annual_cost))
        st.caption("System is owned by a third party; O&M and tax credits stay with the owner.")
    else:
        st.caption("You own the system outright and claim the tax credit.")

    with st.expander("Bill breakdown"):
        st.markdown(f"- **Current annual bill:** {format_currency(results.baseline_annual_bill)}")
        st.markdown(f"- **Annual bill with solar:** {format_currency(results.solar_annual_bill)}")
        st.markdown(f"- **Annual O&M:** {format_currency(results.annual_om_cost)}")

    render_projection_chart(results, inputs.production_factor)

    st.divider()
    if st.button("📨 Request a Proposal", type="primary", use_container_width=True):
        st.session_state.calculator_context = calculator_context(inputs, results)
        st.session_state.contact_topic = Topic.PROPOSAL.value
        st.session_state.page = 'contact'
        st.rerun()


def render_projection_chart(results, production_factor: float):
    """Cumulative savings and NPV over the analysis period."""
    st.subheader("📈 Cumulative Savings Over Time")

    projection = build_savings_projection(results, production_factor)

    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=projection['year'],
        y=projection['cumulative_savings'],
        mode='lines+markers',
        name='Cumulative Savings',
        line=dict(color='green', width=3),
        fill='tozeroy',
        fillcolor='rgba(0, 255, 0, 0.1)'
    ))
    fig.add_trace(go.Scatter(
        x=projection['year'],
        y=projection['cumulative_npv'],
        mode='lines',
        name='Cumulative NPV',
        line=dict(color='orange', width=2, dash='dot')
    ))

    fig.add_hline(y=0, line_dash="dash", line_color="red",
                  annotation_text="Break-even")

    fig.update_layout(
        xaxis_title="Year",
        yaxis_title="Dollars ($)",
        hovermode='x unified',
        height=400
    )

    st.plotly_chart(fig, use_container_width=True)


def page_calculator():
    """Savings calculator page."""
    st.title("☀️ Solar Savings Calculator")
    st.markdown(
        "Estimate your potential savings, payback period, and environmental "
        "impact with our commercial solar calculator."
    )

    col1, col2 = st.columns([1, 1])

    with col1:
        inputs = render_inputs()

    with col2:
        errors = validate_calculator_inputs(inputs)
        if errors:
            for error in errors:
                st.error(error)
            st.info("Correct the inputs to see your results.")
        else:
            render_results(inputs)


def page_contact():
    """Contact form page."""
    st.title("📨 Contact Us")

    context = st.session_state.calculator_context
    if context:
        st.info("Your calculator results will be attached to this request.")

    topics = [t.value for t in Topic]

    with st.form("contact_form"):
        full_name = st.text_input("Full Name *")
        email = st.text_input("Email *")
        col1, col2 = st.columns(2)
        with col1:
            phone = st.text_input("Phone")
        with col2:
            company = st.text_input("Company")
        topic = st.selectbox(
            "Topic *",
            options=topics,
            index=topics.index(st.session_state.contact_topic),
            format_func=lambda x: TOPIC_LABELS[Topic(x)]
        )
        message = st.text_area("Message *")
        consent = st.checkbox("I consent to having my information stored to respond to this inquiry *")
        submitted = st.form_submit_button("Send Message", type="primary")

    if not submitted:
        return

    state = submit_contact_form(
        {
            'full_name': full_name,
            'email': email,
            'phone': phone,
            'company': company,
            'topic': topic,
            'message': message,
            'calculator_context': context,
            'consent': consent,
        },
        load_contact_repository()
    )

    if state.success:
        st.success("✅ Thanks! We'll be in touch within one business day.")
        st.session_state.calculator_context = None
    else:
        st.error(state.error)
        for field_name, messages in state.field_errors.items():
            for msg in messages:
                st.caption(f"⚠️ {field_name.replace('_', ' ').title()}: {msg}")


def main():
    """Main application entry point."""
    configure_logging()
    initialize_session_state()

    pages = {'calculator': "Savings Calculator", 'contact': "Contact"}

    with st.sidebar:
        st.title("☀️ Commercial Solar")
        page = st.radio(
            "Navigate",
            options=list(pages.keys()),
            index=list(pages.keys()).index(st.session_state.page),
            format_func=lambda x: pages[x],
            label_visibility="collapsed"
        )
        if page != st.session_state.page:
            st.session_state.page = page
            st.rerun()

        st.divider()
        st.markdown("### Assumptions")
        st.markdown(f"""
        - Installed cost: ${DEFAULT_CONFIG.system_cost_per_watt:.2f}/W
        - Battery storage: ${DEFAULT_CONFIG.battery_cost_per_kwh:,.0f}/kWh
        - O&M: ${DEFAULT_CONFIG.om_cost_per_kw_year:.0f}/kW/year
        - Degradation: {format_percentage(DEFAULT_CONFIG.annual_degradation_rate, 1)}/year
        - NPV discount rate: {format_percentage(DEFAULT_CONFIG.npv_discount_rate)}
        """)

    if st.session_state.page == 'contact':
        page_contact()
    else:
        page_calculator()


if __name__ == "__main__":
    main()
