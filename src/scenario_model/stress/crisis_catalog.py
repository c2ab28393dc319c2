# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Historical crisis profiles used by the stress test.

This module contains the CrisisProfile reference record and the
CrisisProfileCatalog that holds them. The catalog is read-only at runtime;
adding a crisis is a data change (a new record passed to ``from_records``),
never a change to the stress test engine.
"""

import json
import math
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..errors import UnknownCrisisError, ValidationError

CATALOG_VERSION = "2024.1"


@dataclass(frozen=True)
class CrisisProfile:
    """Parameters of one historical market shock.

    Attributes:
        id: Catalog key (e.g., "covid_2020")
        name: Display name
        market_crash_percentage: Headline crash in percent, never positive (e.g., -25)
        recovery_time_months: Months the market took to recover (>= 0)
        sector_impacts: Sector name to percent move during the crisis
        description: Short narrative of the crisis
        inflation_spike: Inflation increase in percentage points
        interest_rate_change: Policy rate change in percentage points
        unemployment_spike: Unemployment increase in percentage points
        behavioral_impact: Typical investor behaviour observed
    """
    id: str
    name: str
    market_crash_percentage: float
    recovery_time_months: int
    sector_impacts: Dict[str, float] = field(default_factory=dict)
    description: str = ""
    inflation_spike: Optional[float] = None
    interest_rate_change: Optional[float] = None
    unemployment_spike: Optional[float] = None
    behavioral_impact: str = ""

    def __post_init__(self):
        if not str(self.id).strip():
            raise ValidationError("Crisis id is required")
        crash = self._number("market_crash_percentage", self.market_crash_percentage)
        if crash > 0:
            raise ValidationError(
                f"Crisis '{self.id}' market_crash_percentage must be <= 0, got {self.market_crash_percentage}"
            )
        if crash < -100:
            raise ValidationError(f"Crisis '{self.id}' cannot crash more than 100%")
        recovery = self._number("recovery_time_months", self.recovery_time_months)
        if not recovery.is_integer() or recovery < 0:
            raise ValidationError(
                f"Crisis '{self.id}' recovery_time_months must be a whole number >= 0, "
                f"got {self.recovery_time_months!r}"
            )
        if not isinstance(self.sector_impacts, Mapping):
            raise ValidationError(f"Crisis '{self.id}' sector_impacts must be a mapping")
        impacts = {str(k): self._number(f"sector_impacts[{k}]", v) for k, v in self.sector_impacts.items()}
        object.__setattr__(self, "market_crash_percentage", crash)
        object.__setattr__(self, "recovery_time_months", int(recovery))
        object.__setattr__(self, "sector_impacts", impacts)

    def _number(self, name: str, value: Any) -> float:
        try:
            number = float(value)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Crisis '{self.id}' {name} must be a number, got {value!r}") from e
        if not math.isfinite(number):
            raise ValidationError(f"Crisis '{self.id}' {name} must be finite, got {value!r}")
        return number

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'CrisisProfile':
        """Build a profile from a snake_case or camelCase mapping."""
        def pick(*keys, default=None):
            for key in keys:
                if key in data:
                    return data[key]
            return default

        crash = pick("market_crash_percentage", "marketCrashPercentage")
        recovery = pick("recovery_time_months", "recoveryTimeMonths")
        if crash is None or recovery is None:
            raise ValidationError(
                f"Crisis record {data.get('id')!r} needs market_crash_percentage and recovery_time_months"
            )
        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name") or data.get("id", "")),
            market_crash_percentage=crash,
            recovery_time_months=recovery,
            sector_impacts=pick("sector_impacts", "sectorImpacts", default={}) or {},
            description=data.get("description", ""),
            inflation_spike=pick("inflation_spike", "inflationSpike"),
            interest_rate_change=pick("interest_rate_change", "interestRateChange"),
            unemployment_spike=pick("unemployment_spike", "unemploymentSpike"),
            behavioral_impact=pick("behavioral_impact", "behavioralImpact", default="") or "",
        )


class CrisisProfileCatalog:
    """Versioned, read-only table of crisis profiles.

    Example:
        >>> catalog = CrisisProfileCatalog.create_default()
        >>> print(catalog.ids)
        ['covid_2020', 'financial_crisis_2008', 'high_inflation_1980s', 'dot_com_bubble_2000']
        >>> print(catalog.get('covid_2020').market_crash_percentage)
        -25.0
    """

    def __init__(self, profiles: Iterable[CrisisProfile], version: str = CATALOG_VERSION):
        """Initialize the catalog.

        Args:
            profiles: Crisis profiles in display order
            version: Version label of the data set

        Raises:
            ValidationError: If two profiles share an id
        """
        self._profiles: Dict[str, CrisisProfile] = {}
        for profile in profiles:
            if profile.id in self._profiles:
                raise ValidationError(f"Duplicate crisis id in catalog: {profile.id}")
            self._profiles[profile.id] = profile
        self.version = version

    @property
    def ids(self) -> List[str]:
        return list(self._profiles)

    def get(self, crisis_id: str) -> CrisisProfile:
        """Look up a crisis by id.

        Raises:
            UnknownCrisisError: If the id is not in the catalog
        """
        try:
            return self._profiles[crisis_id]
        except (KeyError, TypeError):
            raise UnknownCrisisError(
                f"Unknown crisis '{crisis_id}'. Available: {', '.join(self._profiles)}"
            ) from None

    def list(self) -> List[CrisisProfile]:
        return list(self._profiles.values())

    def __contains__(self, crisis_id: str) -> bool:
        return crisis_id in self._profiles

    def __iter__(self):
        return iter(self._profiles.values())

    def __len__(self) -> int:
        return len(self._profiles)

    @classmethod
    def from_records(cls, records: Any, version: Optional[str] = None) -> 'CrisisProfileCatalog':
        """Load a catalog from data.

        Args:
            records: A list of crisis mappings, a mapping of id to crisis
                     mapping, a document ``{"version": ..., "crises": ...}``
                     holding either, or a JSON string of any of those
            version: Version label; defaults to the document's or CATALOG_VERSION

        Returns:
            CrisisProfileCatalog built from the records
        """
        if isinstance(records, str):
            try:
                records = json.loads(records)
            except json.JSONDecodeError as e:
                raise ValidationError(f"Crisis catalog is not valid JSON: {e}") from e

        if isinstance(records, Mapping) and "crises" in records:
            version = version or records.get("version")
            records = records["crises"]

        if isinstance(records, Mapping):
            entries = [dict(value, id=key) for key, value in records.items()]
        elif isinstance(records, list):
            entries = list(records)
        else:
            raise ValidationError("Crisis catalog must be a list or mapping of crisis records")

        profiles = [CrisisProfile.from_dict(entry) for entry in entries]
        return cls(profiles, version=version or CATALOG_VERSION)

    @classmethod
    def create_default(cls) -> 'CrisisProfileCatalog':
        """Create the built-in catalog of four historical crises."""
        profiles = [
            CrisisProfile(
                id="covid_2020",
                name="COVID-19 Pandemic (2020)",
                market_crash_percentage=-25,
                recovery_time_months=18,
                sector_impacts={
                    "technology": -10,
                    "healthcare": 5,
                    "travel": -50,
                    "realEstate": -20,
                    "energy": -35,
                    "financials": -30,
                },
                description="Global pandemic causing market volatility and economic uncertainty",
                inflation_spike=4,
                interest_rate_change=-2,
                unemployment_spike=8,
                behavioral_impact="High panic selling, flight to safety assets",
            ),
            CrisisProfile(
                id="financial_crisis_2008",
                name="Global Financial Crisis (2008)",
                market_crash_percentage=-40,
                recovery_time_months=36,
                sector_impacts={
                    "banking": -60,
                    "realEstate": -45,
                    "technology": -30,
                    "consumerGoods": -25,
                    "energy": -40,
                    "healthcare": -15,
                },
                description="Banking crisis leading to global recession and market collapse",
                inflation_spike=2,
                interest_rate_change=-3,
                unemployment_spike=12,
                behavioral_impact="Extreme risk aversion, credit market freeze",
            ),
            CrisisProfile(
                id="high_inflation_1980s",
                name="High Inflation Period (1980s)",
                market_crash_percentage=-15,
                recovery_time_months=42,
                sector_impacts={
                    "commodities": 20,
                    "realEstate": 10,
                    "bonds": -30,
                    "growthStocks": -40,
                    "financials": 15,
                    "utilities": -20,
                },
                description="Persistent high inflation leading to monetary policy tightening",
                inflation_spike=8,
                interest_rate_change=5,
                unemployment_spike=6,
                behavioral_impact="Focus on inflation hedges, bond market volatility",
            ),
            CrisisProfile(
                id="dot_com_bubble_2000",
                name="Dot-Com Bubble Burst (2000)",
                market_crash_percentage=-30,
                recovery_time_months=30,
                sector_impacts={
                    "technology": -70,
                    "telecommunications": -60,
                    "media": -45,
                    "utilities": 5,
                    "healthcare": -10,
                    "consumerGoods": -15,
                },
                description="Technology sector collapse after speculative bubble",
                inflation_spike=1,
                interest_rate_change=-2,
                unemployment_spike=4,
                behavioral_impact="Tech sector avoidance, value investing preference",
            ),
        ]
        return cls(profiles)
