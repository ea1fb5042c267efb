# -*- coding: utf-8 -*-
"""
Rooftop solar sizing and financial model

Sizes a residential PV system from monthly consumption and peak sun hours,
prices it, applies central and state subsidies and derives savings, payback
and environmental impact. Pure function, no I/O.
"""
import logging
import math
import numbers
from dataclasses import asdict, dataclass
from decimal import Decimal

from solarcalc.constants import PanelType, get_panel
from solarcalc.policy import DEFAULT_POLICY

logger = logging.getLogger(__name__)

NUMERIC_FIELDS = ("monthly_consumption_kwh", "sun_hours_per_day", "electricity_rate_per_kwh")
MAX_SUN_HOURS_PER_DAY = 24


class SolarInputError(ValueError):
    """Raised when calculation inputs cannot produce a meaningful result"""


@dataclass(frozen=True)
class CalculationInput:
    monthly_consumption_kwh: float
    sun_hours_per_day: float
    electricity_rate_per_kwh: float  # INR per kWh
    state: str
    panel_type: PanelType

    def __post_init__(self):
        # numpy scalars and Decimals from tables become plain floats
        for name in NUMERIC_FIELDS:
            value = getattr(self, name)
            if _is_number(value):
                object.__setattr__(self, name, float(value))

        # Accept the enum's string value from forms and query params
        if not isinstance(self.panel_type, PanelType):
            panel = get_panel(self.panel_type)
            if panel is None:
                raise SolarInputError(f"Unknown panel technology: {self.panel_type!r}")
            object.__setattr__(self, "panel_type", panel.panel_type)


@dataclass(frozen=True)
class CalculationResult:
    required_kw: float
    total_panels: int
    hardware_cost: float
    installation_cost: float
    estimated_cost: float
    central_subsidy: float
    state_subsidy: float
    final_cost: float
    monthly_savings: float
    payback_period: float  # years, inf when there are no savings
    co2_saved: float  # kg per year
    trees_equivalent: int

    @property
    def total_subsidy(self):
        return self.central_subsidy + self.state_subsidy

    def to_dict(self):
        return asdict(self)


def round_half_up(value):
    """Round to the nearest integer with halves going up"""
    return int(math.floor(value + 0.5))


def quantize_capacity(raw_kw):
    """Round a capacity up to the next 0.5 kW step"""
    return math.ceil(raw_kw * 2) / 2


def _is_number(value):
    if isinstance(value, bool):
        return False
    return isinstance(value, (numbers.Real, Decimal))


def _check_number(name, value, allow_zero=True):
    if not _is_number(value):
        raise SolarInputError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise SolarInputError(f"{name} must be finite, got {value!r}")
    if value < 0 or (value == 0 and not allow_zero):
        qualifier = "non-negative" if allow_zero else "greater than zero"
        raise SolarInputError(f"{name} must be {qualifier}, got {value!r}")


def validate_input(inputs):
    """
    Reject inputs the model cannot size

    Zero consumption or a zero tariff are allowed and give an infinite payback
    period. Zero sun hours would make the required capacity infinite, so it
    is rejected along with negative and non-finite values. A day has at most
    24 sun hours.
    """
    _check_number("monthly_consumption_kwh", inputs.monthly_consumption_kwh)
    _check_number("sun_hours_per_day", inputs.sun_hours_per_day, allow_zero=False)
    if inputs.sun_hours_per_day > MAX_SUN_HOURS_PER_DAY:
        raise SolarInputError(
            f"sun_hours_per_day cannot exceed {MAX_SUN_HOURS_PER_DAY}, got {inputs.sun_hours_per_day!r}")
    _check_number("electricity_rate_per_kwh", inputs.electricity_rate_per_kwh)
    if get_panel(inputs.panel_type) is None:
        raise SolarInputError(f"Unknown panel technology: {inputs.panel_type!r}")


def calculate_solar_metrics(inputs, policy=DEFAULT_POLICY):
    """
    Size, price and evaluate a rooftop PV system

    Parameters:
    -----------
    inputs : CalculationInput
        Household consumption profile, tariff, state and panel choice
    policy : SubsidyPolicy
        Subsidy tiers, state rules and sizing constants

    Returns:
    --------
    CalculationResult
        Capacity, costs, subsidies, savings, payback and CO2 figures
    """
    validate_input(inputs)
    constants = policy.sizing
    panel = get_panel(inputs.panel_type)

    daily_kwh = inputs.monthly_consumption_kwh / constants.days_per_month

    # Required capacity, quantized to 0.5 kW. Everything downstream uses the
    # rounded value.
    raw_kw = daily_kwh / (inputs.sun_hours_per_day * constants.system_loss_factor)
    if not raw_kw <= constants.max_capacity_kw:
        raise SolarInputError(
            f"Required capacity {raw_kw:.3g} kW is not computable for a residential "
            f"system (limit {constants.max_capacity_kw:g} kW)")
    rounded_kw = quantize_capacity(raw_kw)

    total_panels = math.ceil(rounded_kw * 1000 / constants.standard_panel_wattage)

    system_wattage = rounded_kw * 1000
    hardware_cost = system_wattage * panel.cost_per_watt
    installation_cost = system_wattage * constants.labor_cost_per_watt
    estimated_cost = hardware_cost + installation_cost

    central_subsidy = policy.central_subsidy(rounded_kw)
    state_subsidy = policy.region_subsidy(inputs.state, rounded_kw)

    final_cost = max(estimated_cost - (central_subsidy + state_subsidy), 0)

    # Full bill offset, no self-consumption modelling
    monthly_savings = inputs.monthly_consumption_kwh * inputs.electricity_rate_per_kwh
    annual_savings = monthly_savings * 12
    # savings are later projected over the whole panel lifespan
    if not math.isfinite(annual_savings * panel.lifespan_years):
        raise SolarInputError("Bill savings are not computable for these inputs")
    payback_period = final_cost / annual_savings if annual_savings > 0 else math.inf

    co2_saved = inputs.monthly_consumption_kwh * 12 * constants.grid_emission_factor
    trees_equivalent = round_half_up(co2_saved / constants.co2_per_tree_per_year)

    logger.debug(
        "Sized %.2f kW raw -> %.1f kW (%d panels) for %s, net cost %.0f INR",
        raw_kw, rounded_kw, total_panels, inputs.state, final_cost,
    )

    return CalculationResult(
        required_kw=rounded_kw,
        total_panels=total_panels,
        hardware_cost=hardware_cost,
        installation_cost=installation_cost,
        estimated_cost=estimated_cost,
        central_subsidy=central_subsidy,
        state_subsidy=state_subsidy,
        final_cost=final_cost,
        monthly_savings=monthly_savings,
        payback_period=payback_period,
        co2_saved=co2_saved,
        trees_equivalent=trees_equivalent,
    )
