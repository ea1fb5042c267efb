# -*- coding: utf-8 -*-
"""
Streamlit front end for the India rooftop solar ROI calculator
"""
import io
import logging
import os

import matplotlib.pyplot as plt
import plotly.graph_objects as go
import streamlit as st

from solarcalc.advisor import DEFAULT_MODEL, AdviceSlot, request_advice
from solarcalc.calculator import CalculationInput, SolarInputError, calculate_solar_metrics
from solarcalc.constants import (
    DEFAULT_ELECTRICITY_RATE,
    DEFAULT_MONTHLY_CONSUMPTION,
    DEFAULT_PANEL_TYPE,
    DEFAULT_STATE,
    DEFAULT_SUN_HOURS,
    INDIAN_STATES,
    PANEL_CONFIGS,
    PROJECTION_YEARS,
    PanelType,
)
from solarcalc.financial import (
    breakeven_year,
    cost_breakdown,
    format_inr,
    format_payback,
    lifetime_savings,
    project_savings,
)

logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))
logger = logging.getLogger(__name__)


def get_secret(name, default=None):
    """Read a value from Streamlit secrets, then the environment"""
    try:
        value = st.secrets.get(name)
    except FileNotFoundError:
        value = None
    return value or os.environ.get(name, default)


def render_projection_chart(result):
    """Cumulative savings vs. net benefit over the projection horizon"""
    projection = project_savings(result, PROJECTION_YEARS)

    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=projection["label"], y=projection["cumulative_savings"],
        name="Savings", mode="lines", fill="tozeroy",
        line=dict(color="#1e293b", width=2),
    ))
    fig.add_trace(go.Scatter(
        x=projection["label"], y=projection["net_benefit"],
        name="Profit", mode="lines", fill="tozeroy",
        line=dict(color="#fbbf24", width=4),
    ))
    fig.update_layout(
        title=f"Wealth Projection: {PROJECTION_YEARS}-Year Financial Forecast",
        xaxis_title="Year",
        yaxis_title="INR",
        hovermode="x unified",
        height=380,
    )
    st.plotly_chart(fig, use_container_width=True)

    if result.monthly_savings <= 0:
        return
    year = breakeven_year(result, PROJECTION_YEARS)
    if year is not None:
        st.caption(f"Savings overtake the net investment in year {year}.")
    else:
        st.caption(f"Savings do not cover the net investment within {PROJECTION_YEARS} years.")


def render_cost_chart(result):
    breakdown = cost_breakdown(result)
    colors = ["#64748b", "#64748b", "#fbbf24", "#fbbf24", "#16a34a"]

    fig, ax = plt.subplots(figsize=(8, 4))
    ax.barh(breakdown["item"], breakdown["amount"], color=colors)
    ax.axvline(0, color="black", linewidth=0.8)
    ax.set_xlabel("INR")
    ax.set_title("Cost Breakdown")
    ax.grid(axis="x", linestyle="--", alpha=0.7)
    ax.invert_yaxis()

    buf = io.BytesIO()
    plt.tight_layout()
    fig.savefig(buf, format="png")
    plt.close(fig)
    buf.seek(0)
    st.image(buf, caption="Hardware and labour less subsidies")


def render_results(inputs, result):
    st.subheader("Your Solar Report")

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Solar Capacity", f"{result.required_kw:g} kW")
    with col2:
        st.metric("Panels", f"{result.total_panels}")
    with col3:
        st.metric("Payback Period", format_payback(result.payback_period))
    with col4:
        st.metric("Monthly Savings", format_inr(result.monthly_savings))

    st.markdown("### 🏛️ Financial Analysis")
    fin_col1, fin_col2 = st.columns([1, 1])
    with fin_col1:
        st.markdown(f"**Hardware Components:** {format_inr(result.hardware_cost)}")
        st.markdown(f"**Labor & Installation:** {format_inr(result.installation_cost)}")
        st.markdown(f"**Estimated Cost:** {format_inr(result.estimated_cost)}")
        st.markdown(f"**Central Subsidy (PM Surya Ghar):** -{format_inr(result.central_subsidy)}")
        st.markdown(f"**{inputs.state} Subsidy:** -{format_inr(result.state_subsidy)}")
        st.markdown(f"**Govt Subsidy (Total):** -{format_inr(result.total_subsidy)}")
        st.metric("Total Investment", format_inr(result.final_cost), help="Net of all incentives")

        panel = PANEL_CONFIGS[inputs.panel_type]
        st.metric(
            f"Net Benefit over {panel.lifespan_years} Years",
            format_inr(lifetime_savings(result, panel)),
        )
    with fin_col2:
        render_cost_chart(result)

    st.markdown("### 🌱 Impact Factor")
    eco_col1, eco_col2 = st.columns(2)
    with eco_col1:
        st.metric("CO₂ Avoided / Year", f"{result.co2_saved:,.0f} kg")
    with eco_col2:
        st.metric("Tree Equivalent", f"{result.trees_equivalent}")

    st.markdown("### 📈 Wealth Projection")
    render_projection_chart(result)


def render_advice(advice):
    st.markdown("### ⚡ Parth AI Analysis")
    st.markdown(f'<div class="advice-card"><i>"{advice.summary}"</i></div>', unsafe_allow_html=True)
    for benefit in advice.benefits:
        st.markdown(f"- **{benefit}**")
    st.markdown("**Expert Recommendation**")
    st.write(advice.recommendations)


def main():
    st.set_page_config(
        page_title="Parth Solar ROI Calculator",
        page_icon="☀️",
        layout="wide",
    )

    st.markdown("""
    <style>
    .hero-title {
        font-size: 2.2rem;
        font-weight: 700;
        color: #f59e0b;
        text-align: center;
    }
    .advice-card {
        border-left: 4px solid #f59e0b;
        padding: 12px 16px;
    }
    </style>
    """, unsafe_allow_html=True)

    st.markdown('<p class="hero-title">Solar Powered. Financially Free.</p>', unsafe_allow_html=True)

    with st.expander("ℹ️ About this tool"):
        st.write("""
        Estimate the rooftop solar system your home needs, what it costs after
        PM Surya Ghar and state subsidies, and how quickly it pays for itself.

        ### How it works:
        1. Daily need is your monthly units divided by 30
        2. Capacity covers that need at your peak sun hours after 25% system losses, rounded up to 0.5 kW
        3. Panels are 540 W modules; labour is about ₹12 per watt
        4. Savings assume solar offsets your whole bill
        """)

    if "advice_slot" not in st.session_state:
        st.session_state.advice_slot = AdviceSlot()
    if "calc_input" not in st.session_state:
        st.session_state.calc_input = None
    if "calc_result" not in st.session_state:
        st.session_state.calc_result = None

    tab1, tab2 = st.tabs(["🧮 System Configurator", "💰 Results"])

    with tab1:
        col1, col2 = st.columns(2)
        with col1:
            state = st.selectbox(
                "Select State", INDIAN_STATES,
                index=INDIAN_STATES.index(DEFAULT_STATE),
            )
            monthly_consumption = st.number_input(
                "Monthly Units (kWh)",
                min_value=0.0, max_value=100000.0,
                value=DEFAULT_MONTHLY_CONSUMPTION, step=10.0,
                help="Average monthly electricity consumption from your bill",
            )
        with col2:
            sun_hours = st.number_input(
                "Peak Sun Hours",
                min_value=0.1, max_value=12.0,
                value=DEFAULT_SUN_HOURS, step=0.1,
                help="Average daily full-intensity sunshine hours for your location",
            )
            electricity_rate = st.number_input(
                "Unit Rate (₹/kWh)",
                min_value=0.0, max_value=100.0,
                value=DEFAULT_ELECTRICITY_RATE, step=0.5,
            )

        panel_types = list(PanelType)
        panel_type = st.radio(
            "Panel Technology",
            panel_types,
            index=panel_types.index(DEFAULT_PANEL_TYPE),
            format_func=lambda p: f"{p.label}: {PANEL_CONFIGS[p].description}",
        )

        if st.button("Generate ROI Report", type="primary"):
            try:
                inputs = CalculationInput(
                    monthly_consumption_kwh=monthly_consumption,
                    sun_hours_per_day=sun_hours,
                    electricity_rate_per_kwh=electricity_rate,
                    state=state,
                    panel_type=panel_type,
                )
                result = calculate_solar_metrics(inputs)
            except SolarInputError as e:
                logger.info("Rejected calculation input: %s", e)
                st.error(f"Invalid input: {e}")
                st.stop()

            st.session_state.calc_input = inputs
            st.session_state.calc_result = result

            with st.spinner("Crunching numbers..."):
                request_advice(
                    st.session_state.advice_slot, inputs, result,
                    api_key=get_secret("GEMINI_API_KEY"),
                    model=get_secret("GEMINI_MODEL", DEFAULT_MODEL),
                )
            st.success("Report ready. Open the 'Results' tab.")

    with tab2:
        if st.session_state.calc_result is None:
            st.info("Configure your energy profile and click 'Generate ROI Report' to see your savings.")
        else:
            render_results(st.session_state.calc_input, st.session_state.calc_result)
            advice = st.session_state.advice_slot.current
            if advice is not None:
                render_advice(advice)


if __name__ == "__main__":
    main()
