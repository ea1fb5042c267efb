# -*- coding: utf-8 -*-
"""
Static configuration data for the rooftop solar calculator

Panel technologies, supported states and the fixed engineering constants
used by the sizing model. Values are approximate Indian market figures.
"""
from dataclasses import dataclass
from enum import Enum


class PanelType(str, Enum):
    MONOCRYSTALLINE = "MONOCRYSTALLINE"
    POLYCRYSTALLINE = "POLYCRYSTALLINE"
    DCR_PANELS = "DCR_PANELS"  # Domestic Content Requirement, needed for subsidies

    @property
    def label(self):
        return self.value.replace("_", " ").title().replace("Dcr", "DCR")


@dataclass(frozen=True)
class PanelTechnology:
    """Immutable parameters of one panel technology"""
    panel_type: PanelType
    efficiency: float     # fraction, 0-1
    cost_per_watt: float  # INR per watt
    lifespan_years: int
    description: str


PANEL_CONFIGS = {
    PanelType.MONOCRYSTALLINE: PanelTechnology(
        panel_type=PanelType.MONOCRYSTALLINE,
        efficiency=0.20,
        cost_per_watt=32,
        lifespan_years=25,
        description="High performance. Best for cities with limited roof space like Delhi or Mumbai.",
    ),
    PanelType.POLYCRYSTALLINE: PanelTechnology(
        panel_type=PanelType.POLYCRYSTALLINE,
        efficiency=0.16,
        cost_per_watt=26,
        lifespan_years=20,
        description="Budget-friendly. Widely used in rural solar installations.",
    ),
    PanelType.DCR_PANELS: PanelTechnology(
        panel_type=PanelType.DCR_PANELS,
        efficiency=0.19,
        cost_per_watt=35,
        lifespan_years=25,
        description="Made in India. Mandatory for availing PM Surya Ghar subsidies.",
    ),
}

INDIAN_STATES = [
    "Uttar Pradesh", "Maharashtra", "Gujarat", "Karnataka", "Tamil Nadu",
    "Rajasthan", "Delhi", "West Bengal", "Madhya Pradesh", "Haryana",
]

# Sizing constants
DAYS_PER_MONTH = 30
STANDARD_PANEL_WATTAGE = 540  # W, 540W modules are now standard in India
SYSTEM_LOSS_FACTOR = 0.75  # dust and heat losses are high in India
LABOR_COST_PER_WATT = 12  # INR, roughly 10-15 per watt
MAX_CAPACITY_KW = 1000  # upper limit on a single residential quote

# Environmental constants
GRID_EMISSION_FACTOR = 0.8  # kg CO2 per kWh, coal heavy grid
CO2_PER_TREE_PER_YEAR = 21  # kg CO2 absorbed by one mature tree

# Projection horizon for the wealth chart
PROJECTION_YEARS = 15

# Default form values
DEFAULT_MONTHLY_CONSUMPTION = 300.0
DEFAULT_SUN_HOURS = 5.0
DEFAULT_ELECTRICITY_RATE = 8.50
DEFAULT_STATE = "Uttar Pradesh"
DEFAULT_PANEL_TYPE = PanelType.DCR_PANELS


def get_panel(panel_type):
    """Look up a panel technology by enum member or its string value.

    Returns None for anything that is not a known technology.
    """
    if isinstance(panel_type, PanelType):
        return PANEL_CONFIGS.get(panel_type)
    try:
        return PANEL_CONFIGS.get(PanelType(str(panel_type).strip().upper()))
    except ValueError:
        return None
