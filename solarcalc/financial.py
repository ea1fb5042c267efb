# -*- coding: utf-8 -*-
"""
Savings projections and display formatting built on a CalculationResult

Nothing here changes the sizing result, these helpers only reshape it for
charts and tables.
"""
import math

import numpy as np
import pandas as pd

from solarcalc.calculator import round_half_up
from solarcalc.constants import PROJECTION_YEARS


def project_savings(result, years=PROJECTION_YEARS):
    """
    Projects cumulative bill savings against the net investment

    Parameters:
    -----------
    result : CalculationResult
        Output of calculate_solar_metrics
    years : int
        Number of years to project (default: 15)

    Returns:
    --------
    pandas.DataFrame
        One row per year with columns year, label, cumulative_savings and
        net_benefit (cumulative savings minus net cost), both rounded to
        whole rupees
    """
    if years < 1:
        raise ValueError("years must be at least 1")

    year_index = np.arange(1, years + 1)
    cumulative = result.monthly_savings * 12 * year_index

    return pd.DataFrame({
        "year": year_index,
        "label": [f"Y{year}" for year in year_index],
        "cumulative_savings": [round_half_up(value) for value in cumulative],
        "net_benefit": [round_half_up(value - result.final_cost) for value in cumulative],
    })


def breakeven_year(result, years=PROJECTION_YEARS):
    """First projected year in which savings cover the net cost, or None

    Without any bill savings there is nothing to break even on.
    """
    if result.monthly_savings <= 0:
        return None
    projection = project_savings(result, years)
    positive = projection[projection["net_benefit"] >= 0]
    if positive.empty:
        return None
    return int(positive["year"].iloc[0])


def lifetime_savings(result, panel):
    """Net benefit over the full lifespan of the chosen panel technology"""
    return result.monthly_savings * 12 * panel.lifespan_years - result.final_cost


def cost_breakdown(result):
    """Line items for the financial analysis table, subsidies as negatives"""
    return pd.DataFrame({
        "item": [
            "Hardware Components",
            "Labor & Installation",
            "Central Subsidy (PM Surya Ghar)",
            "State Subsidy",
            "Total Investment",
        ],
        "amount": [
            result.hardware_cost,
            result.installation_cost,
            -result.central_subsidy,
            -result.state_subsidy,
            result.final_cost,
        ],
    })


def _group_indian(digits):
    # Last three digits, then groups of two: 12,34,56,789
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_inr(amount):
    """Format rupees with Indian digit grouping and no decimals"""
    value = round_half_up(abs(amount or 0))
    sign = "-" if (amount or 0) < 0 and value else ""
    return f"{sign}₹{_group_indian(str(value))}"


def format_payback(years):
    if years is None or not math.isfinite(years):
        return "N/A"
    return f"{years:.1f} years"
