# -*- coding: utf-8 -*-
"""
Subsidy policy for residential rooftop solar

The central PM Surya Ghar subsidy is a step function of installed capacity.
States may add their own incentive on top; each state rule is a small
strategy object so new states can be added without touching the sizing model.
"""
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping, Protocol, Tuple

from solarcalc.constants import (
    CO2_PER_TREE_PER_YEAR,
    DAYS_PER_MONTH,
    GRID_EMISSION_FACTOR,
    LABOR_COST_PER_WATT,
    MAX_CAPACITY_KW,
    STANDARD_PANEL_WATTAGE,
    SYSTEM_LOSS_FACTOR,
)


@dataclass(frozen=True)
class SizingConstants:
    """Engineering and environmental constants read by the sizing model"""
    days_per_month: float = DAYS_PER_MONTH
    system_loss_factor: float = SYSTEM_LOSS_FACTOR
    standard_panel_wattage: float = STANDARD_PANEL_WATTAGE
    labor_cost_per_watt: float = LABOR_COST_PER_WATT
    grid_emission_factor: float = GRID_EMISSION_FACTOR
    co2_per_tree_per_year: float = CO2_PER_TREE_PER_YEAR
    max_capacity_kw: float = MAX_CAPACITY_KW


@dataclass(frozen=True)
class SubsidyTier:
    min_kw: float
    amount: float


@dataclass(frozen=True)
class CentralSubsidySchedule:
    """
    Tiered central subsidy

    Parameters:
    -----------
    tiers : tuple of SubsidyTier
        Capacity thresholds and fixed amounts. Order does not matter, the
        highest threshold that the capacity reaches wins.
    """
    tiers: Tuple[SubsidyTier, ...] = ()

    def __post_init__(self):
        ordered = tuple(sorted(self.tiers, key=lambda t: t.min_kw, reverse=True))
        object.__setattr__(self, "tiers", ordered)

    def amount_for(self, capacity_kw):
        for tier in self.tiers:
            if capacity_kw >= tier.min_kw:
                return tier.amount
        return 0


class RegionSubsidyRule(Protocol):
    def amount_for(self, capacity_kw: float) -> float:
        ...


@dataclass(frozen=True)
class CappedPerKwSubsidy:
    """Proportional state subsidy with an upper limit"""
    rate_per_kw: float
    cap: float

    def amount_for(self, capacity_kw):
        return min(capacity_kw * self.rate_per_kw, self.cap)


@dataclass(frozen=True)
class NoRegionSubsidy:
    def amount_for(self, capacity_kw):
        return 0


NO_REGION_SUBSIDY = NoRegionSubsidy()


@dataclass(frozen=True)
class SubsidyPolicy:
    """
    Everything jurisdiction specific that the sizing model reads

    Parameters:
    -----------
    central : CentralSubsidySchedule
        National capacity based subsidy
    regions : mapping of str to RegionSubsidyRule
        State add-ons keyed by state name. States not listed get nothing.
    sizing : SizingConstants
        Loss factor, panel wattage, labour rate and emission factors
    """
    central: CentralSubsidySchedule
    regions: Mapping[str, RegionSubsidyRule] = field(default_factory=dict)
    sizing: SizingConstants = field(default_factory=SizingConstants)

    def __post_init__(self):
        object.__setattr__(self, "regions", MappingProxyType(dict(self.regions)))

    def central_subsidy(self, capacity_kw):
        return self.central.amount_for(capacity_kw)

    def region_rule(self, state):
        return self.regions.get(state, NO_REGION_SUBSIDY)

    def region_subsidy(self, state, capacity_kw):
        return self.region_rule(state).amount_for(capacity_kw)

    def with_region(self, state, rule):
        """Return a copy of this policy with a state rule added or replaced"""
        regions = dict(self.regions)
        regions[state] = rule
        return replace(self, regions=regions)

    def with_sizing(self, **changes):
        return replace(self, sizing=replace(self.sizing, **changes))


# PM Surya Ghar: Muft Bijli Yojana
PM_SURYA_GHAR = CentralSubsidySchedule(tiers=(
    SubsidyTier(min_kw=1, amount=30000),
    SubsidyTier(min_kw=2, amount=60000),
    SubsidyTier(min_kw=3, amount=78000),
))

# UP adds 15,000 per kW for domestic consumers, up to 30,000
STATE_SUBSIDIES = {
    "Uttar Pradesh": CappedPerKwSubsidy(rate_per_kw=15000, cap=30000),
}

DEFAULT_POLICY = SubsidyPolicy(central=PM_SURYA_GHAR, regions=STATE_SUBSIDIES)
