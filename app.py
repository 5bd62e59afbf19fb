"""Exit Readiness Monte Carlo Simulator - Streamlit App."""

from __future__ import annotations

import logging

import numpy as np
import plotly.graph_objects as go
import streamlit as st

from exit_readiness.calculators import inflation_factor
from exit_readiness.exceptions import ExitReadinessError, ProfileValidationError
from exit_readiness.housing import BuyParams, RelocateParams, run_housing_scenarios
from exit_readiness.mortgage import PurchaseDetails, RateStep
from exit_readiness.profile import HomeStatus, HouseholdMode, Profile, create_default_profile
from exit_readiness.results import ScoreLevel
from exit_readiness.simulator import ENGINE_VERSION, run_simulation
from exit_readiness.validation import validate_all
from utils.helpers import format_currency

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


LEVEL_COLORS = {
    ScoreLevel.GREEN: "#198754",
    ScoreLevel.YELLOW: "#ffc107",
    ScoreLevel.ORANGE: "#fd7e14",
    ScoreLevel.RED: "#dc3545",
}

# Variable-rate schedule: rate rises 0.3 points every 5 years, up to 2.3%
DEFAULT_RATE_STEPS = tuple(RateStep(year=5 * i, rate=0.5 + 0.3 * i) for i in range(1, 7))

st.set_page_config(page_title="Exit Readiness", layout="wide")

st.title("Exit Readiness Monte Carlo Simulator")
st.caption(f"Engine version {ENGINE_VERSION}. Amounts in 万円 (10,000 yen).")

defaults = create_default_profile()

# =============================================================================
# SIDEBAR INPUTS
# =============================================================================

with st.sidebar:
    st.header("Household")
    current_age = st.number_input("Current age", min_value=18, max_value=80, value=defaults.current_age)
    target_retire_age = st.number_input(
        "Target retirement age",
        min_value=current_age,
        max_value=80,
        value=max(defaults.target_retire_age, current_age),
    )
    couple = st.toggle("Two-earner household", value=defaults.is_couple)

    st.header("Income (annual)")
    gross_income = st.number_input("Gross salary", min_value=0.0, value=defaults.gross_income, step=50.0)
    rsu_annual = st.number_input("Equity compensation (RSU)", min_value=0.0, value=0.0, step=50.0)
    side_income = st.number_input("Side income", min_value=0.0, value=0.0, step=10.0)

    partner_gross = 0.0
    partner_rsu = 0.0
    partner_retire_age = None
    if couple:
        partner_gross = st.number_input("Partner gross salary", min_value=0.0, value=600.0, step=50.0)
        partner_rsu = st.number_input("Partner equity compensation", min_value=0.0, value=0.0, step=50.0)
        partner_retire_age = st.number_input(
            "Partner stops working at (your age)",
            min_value=current_age,
            max_value=80,
            value=target_retire_age,
        )

    use_auto_tax = st.toggle("Estimate tax automatically", value=defaults.use_auto_tax_rate)
    effective_tax_rate = defaults.effective_tax_rate
    if not use_auto_tax:
        effective_tax_rate = st.slider("Effective tax rate (%)", 0.0, 60.0, defaults.effective_tax_rate, 1.0)

    st.header("Expenses (annual)")
    living_cost = st.number_input("Living cost", min_value=0.0, value=defaults.living_cost_annual, step=10.0)
    home_status = st.selectbox(
        "Housing",
        options=[HomeStatus.RENTER, HomeStatus.OWNER],
        format_func=lambda s: s.value.capitalize(),
    )
    housing_cost = st.number_input(
        "Rent" if home_status == HomeStatus.RENTER else "Mortgage + owner costs",
        min_value=0.0,
        value=defaults.housing_cost_annual,
        step=10.0,
    )

    home_value = 0.0
    mortgage_principal = 0.0
    mortgage_rate = 0.0
    mortgage_years = 0
    if home_status == HomeStatus.OWNER:
        home_value = st.number_input("Home market value", min_value=0.0, value=6_000.0, step=100.0)
        mortgage_principal = st.number_input("Mortgage balance", min_value=0.0, value=4_000.0, step=100.0)
        mortgage_rate = st.slider("Mortgage rate (%)", 0.0, 5.0, 0.7, 0.1)
        mortgage_years = st.number_input("Years remaining", min_value=0, max_value=50, value=25)

    st.header("Assets")
    asset_cash = st.number_input("Cash", min_value=0.0, value=defaults.asset_cash, step=100.0)
    asset_invest = st.number_input("Investments", min_value=0.0, value=defaults.asset_invest, step=100.0)
    asset_dc = st.number_input("Retirement account (DC)", min_value=0.0, value=defaults.asset_dc, step=50.0)
    dc_contribution = st.number_input(
        "DC contribution per year", min_value=0.0, value=defaults.dc_contribution_annual, step=6.0
    )

    st.header("Assumptions")
    expected_return = st.slider("Expected return (%)", -5.0, 15.0, defaults.expected_return, 0.5)
    volatility = st.slider("Volatility", 0.0, 0.5, defaults.volatility, 0.01)
    inflation_rate = st.slider("Inflation (%)", 0.0, 6.0, defaults.inflation_rate, 0.1)
    rent_inflation_rate = st.slider("Rent inflation (%)", 0.0, 6.0, defaults.rent_inflation_rate or 0.0, 0.1)

    st.header("Retirement")
    spending_multiplier = st.slider(
        "Spending after retirement (x)", 0.5, 1.5, defaults.retire_spending_multiplier, 0.05
    )
    passive_income = st.number_input("Passive income per year", min_value=0.0, value=0.0, step=10.0)
    post_retire_income = st.number_input("Post-retirement work income", min_value=0.0, value=0.0, step=10.0)
    post_retire_end_age = st.number_input(
        "Work income until age", min_value=target_retire_age, max_value=90, value=max(75, target_retire_age)
    )

    st.header("Visualization")
    show_inflation_adjusted = st.toggle("Show in today's money", value=False)

profile = Profile(
    current_age=int(current_age),
    target_retire_age=int(target_retire_age),
    partner_retire_age=int(partner_retire_age) if partner_retire_age is not None else None,
    mode=HouseholdMode.COUPLE if couple else HouseholdMode.SOLO,
    gross_income=gross_income,
    rsu_annual=rsu_annual,
    side_income_net=side_income,
    partner_gross_income=partner_gross,
    partner_rsu_annual=partner_rsu,
    post_retire_income=post_retire_income,
    post_retire_income_end_age=int(post_retire_end_age),
    living_cost_annual=living_cost,
    housing_cost_annual=housing_cost,
    home_status=home_status,
    home_market_value=home_value,
    mortgage_principal=mortgage_principal,
    mortgage_interest_rate=mortgage_rate,
    mortgage_years_remaining=int(mortgage_years),
    asset_cash=asset_cash,
    asset_invest=asset_invest,
    asset_dc=asset_dc,
    dc_contribution_annual=dc_contribution,
    expected_return=expected_return,
    inflation_rate=inflation_rate,
    rent_inflation_rate=rent_inflation_rate,
    volatility=volatility,
    effective_tax_rate=effective_tax_rate,
    use_auto_tax_rate=use_auto_tax,
    retire_spending_multiplier=spending_multiplier,
    retire_passive_income=passive_income,
)

# =============================================================================
# VALIDATION
# =============================================================================

validation_result = validate_all(profile)
if not validation_result.is_valid():
    st.error("Please fix the following input errors:")
    for error_msg in validation_result.error_messages():
        st.warning(error_msg)
    st.stop()

# =============================================================================
# SIMULATION
# =============================================================================

try:
    result = run_simulation(profile)
except ProfileValidationError as e:
    st.error(str(e))
    st.stop()
except ExitReadinessError as e:
    logger.error(f"Simulation failed: {e}")
    st.error("The simulation failed. Please adjust the inputs and try again.")
    st.stop()

score = result.score
metrics = result.metrics
bands = result.paths.to_frame()

if show_inflation_adjusted:
    deflators = np.array([inflation_factor(profile, age) for age in bands.index])
    bands = bands.div(deflators, axis=0)

# =============================================================================
# HEADLINE METRICS
# =============================================================================

cols = st.columns(4)
cols[0].metric("Exit Readiness Score", f"{score.overall}", score.level.value)
cols[1].metric("Survival rate", f"{metrics.survival_rate:.1f}%")
cols[2].metric("FIRE age", str(metrics.fire_age) if metrics.fire_age is not None else "Not reached")
cols[3].metric("Median assets at 100", format_currency(metrics.asset_at_100))

# =============================================================================
# CHARTS
# =============================================================================

fan_chart = go.Figure()
fan_chart.add_traces(
    [
        go.Scatter(
            x=bands.index,
            y=bands["p90"],
            line=dict(color="rgba(0,0,0,0)"),
            showlegend=False,
            hoverinfo="skip",
        ),
        go.Scatter(
            x=bands.index,
            y=bands["p75"],
            fill="tonexty",
            fillcolor="rgba(0, 123, 255, 0.15)",
            line=dict(color="rgba(0,0,0,0)"),
            name="75-90%",
        ),
        go.Scatter(
            x=bands.index,
            y=bands["p25"],
            fill="tonexty",
            fillcolor="rgba(0, 123, 255, 0.25)",
            line=dict(color="rgba(0,0,0,0)"),
            name="25-75%",
        ),
        go.Scatter(
            x=bands.index,
            y=bands["p10"],
            fill="tonexty",
            fillcolor="rgba(0, 123, 255, 0.35)",
            line=dict(color="rgba(0,0,0,0)"),
            name="10-25%",
        ),
        go.Scatter(
            x=bands.index,
            y=bands["median"],
            line=dict(color="#0d6efd", width=3),
            name="Median",
        ),
    ]
)
fan_chart.add_vline(
    x=profile.target_retire_age,
    line_dash="dot",
    line_color="gray",
    annotation_text="Retirement",
    annotation_position="top left",
)
fan_chart.add_hline(y=0, line_color="#dc3545", line_width=1)
fan_chart.update_layout(
    title="Projected total assets",
    xaxis_title="Age",
    yaxis_title="Assets (万円)",
    hovermode="x unified",
)
st.plotly_chart(fan_chart, use_container_width=True)

score_col, cash_col = st.columns(2)

with score_col:
    st.subheader("Score breakdown")
    score_chart = go.Figure(
        go.Bar(
            x=["Survival", "Lifestyle", "Risk", "Liquidity"],
            y=[score.survival, score.lifestyle, score.risk, score.liquidity],
            marker_color=LEVEL_COLORS[score.level],
        )
    )
    score_chart.update_layout(yaxis=dict(range=[0, 100]), height=320)
    st.plotly_chart(score_chart, use_container_width=True)

with cash_col:
    st.subheader(f"Cash flow at retirement (age {profile.target_retire_age})")
    cash_flow = result.cash_flow
    st.write(f"Income: {format_currency(cash_flow.income)}")
    st.write(f"Pension: {format_currency(cash_flow.pension)}")
    st.write(f"Dividends: {format_currency(cash_flow.dividends)}")
    st.write(f"Expenses: {format_currency(cash_flow.expenses)}")
    st.write(f"**Net: {format_currency(cash_flow.net_cash_flow)}**")

# =============================================================================
# HOUSING COMPARISON
# =============================================================================

with st.expander("Housing comparison", expanded=False):
    compare_buy = st.toggle("Evaluate buying a home", value=home_status == HomeStatus.RENTER)
    compare_relocate = st.toggle("Evaluate relocating", value=False, disabled=home_status != HomeStatus.OWNER)

    buy_params = None
    if compare_buy:
        buy_cols = st.columns(3)
        price = buy_cols[0].number_input("Property price", min_value=0.0, value=7_000.0, step=100.0)
        down = buy_cols[1].number_input("Down payment", min_value=0.0, value=700.0, step=50.0)
        buy_after = buy_cols[2].selectbox("Buy after (years)", options=[0, 3, 10])
        loan_cols = st.columns(3)
        loan_years = loan_cols[0].number_input("Loan term", min_value=1, max_value=50, value=35)
        loan_rate = loan_cols[1].slider("Initial rate (%)", 0.0, 5.0, 0.5, 0.1)
        owner_cost = loan_cols[2].number_input("Owner costs per year", min_value=0.0, value=40.0, step=5.0)
        variable_rate = st.toggle("Variable rate (rises 0.3 points every 5 years)", value=False)
        buy_params = BuyParams(
            property_price=price,
            down_payment=down,
            mortgage_years=int(loan_years),
            interest_rate=loan_rate,
            owner_annual_cost=owner_cost,
            rate_steps=DEFAULT_RATE_STEPS if variable_rate else (),
            owner_cost_escalation=1.5,
            buy_after_years=int(buy_after),
        )

    relocate_params = None
    if compare_relocate and home_status == HomeStatus.OWNER:
        reloc_cols = st.columns(3)
        new_price = reloc_cols[0].number_input("New property price", min_value=0.0, value=8_000.0, step=100.0)
        new_down = reloc_cols[1].number_input("New down payment", min_value=0.0, value=1_000.0, step=50.0)
        relocate_after = reloc_cols[2].selectbox("Relocate after (years)", options=[0, 3, 5])
        relocate_params = RelocateParams(
            current_property_value=home_value,
            current_mortgage_remaining=mortgage_principal,
            new_property=PurchaseDetails(property_price=new_price, down_payment=new_down),
            relocate_after_years=int(relocate_after),
        )

    if (buy_params or relocate_params) and st.button("Run housing comparison"):
        try:
            with st.spinner("Simulating housing scenarios..."):
                scenarios = run_housing_scenarios(profile, buy_params, relocate_params, max_workers=3)
        except ExitReadinessError as e:
            logger.error(f"Housing comparison failed: {e}")
            st.error(f"Housing comparison failed: {e}")
            scenarios = []

        for scenario in scenarios:
            scenario_score = scenario.simulation.score
            st.markdown(
                f"**{scenario.type.value}**: score {scenario_score.overall} ({scenario_score.level.value}), "
                f"safe retirement age {scenario.safe_fire_age or 'not reached'}, "
                f"monthly {format_currency(scenario.monthly_payment)}, "
                f"40-year cost {format_currency(scenario.total_cost_40_years)}, "
                f"assets at 60 {format_currency(scenario.assets_at_60)}"
            )

        if scenarios:
            compare_chart = go.Figure()
            for scenario in scenarios:
                frame = scenario.simulation.paths.to_frame()
                compare_chart.add_trace(go.Scatter(x=frame.index, y=frame["median"], name=scenario.type.value))
            compare_chart.update_layout(title="Median assets by scenario", xaxis_title="Age")
            st.plotly_chart(compare_chart, use_container_width=True)
