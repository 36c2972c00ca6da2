"""
Reference Data Tables - static market, industry and city fixtures for exports
Snapshot of World Bank / IMF / national statistics figures. No live feed:
updating a number means shipping a new snapshot.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

SNAPSHOT_VERSION = "2024.1"


class CompetitionLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


@dataclass(frozen=True)
class MarketRecord:
    """Country-level market facts. Currency strings are pre-baked display literals."""
    id: str
    country: str
    population: str
    gdp: str
    market_size_usd: float          # USD billions
    growth_pct: float
    digital_penetration_pct: float
    data_source: str
    market_size: str = ""
    gdp_per_capita: str = ""
    internet_users: str = ""
    urbanization_pct: float = 0.0
    median_age: float = 0.0
    highlight: str = ""


@dataclass(frozen=True)
class IndustryRecord:
    id: str
    name: str
    market_size_usd: float          # USD billions
    growth_pct: float
    competition_level: CompetitionLevel
    opportunity_score: int          # 0-100
    source: str
    market_size: str = ""
    trends: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class CityRecord:
    id: str
    name: str
    country: str
    population: str
    gdp_per_capita: str
    digital_infrastructure: int
    business_environment: int
    cost_of_living: str
    key_industries: Tuple[str, ...] = field(default_factory=tuple)
    opportunities: Tuple[str, ...] = field(default_factory=tuple)
    challenges: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class DigitalMetrics:
    country: str
    internet_pct: int
    mobile_pct: int
    ecommerce_pct: int
    digital_payments_pct: int
    social_media_pct: int
    cloud_adoption_pct: int
    fintech_usage_pct: int


@dataclass(frozen=True)
class ConsumerStat:
    metric: str
    value: str
    trend: str
    insight: str


_SOURCE = "World Bank, IMF Economic Outlook 2024, National Statistical Offices"

_MARKETS: Tuple[MarketRecord, ...] = (
    MarketRecord(
        id="indonesia", country="Indonesia", population="273.5M", gdp="$1.32T",
        market_size_usd=287.2, growth_pct=5.2, digital_penetration_pct=73,
        data_source=_SOURCE, market_size="$287.2B", gdp_per_capita="$4,824",
        internet_users="196M", urbanization_pct=56, median_age=30.2,
        highlight="Largest market in the region, mobile commerce leader with a young, urbanizing consumer base.",
    ),
    MarketRecord(
        id="thailand", country="Thailand", population="69.8M", gdp="$543B",
        market_size_usd=127.4, growth_pct=2.8, digital_penetration_pct=85,
        data_source=_SOURCE, market_size="$127.4B", gdp_per_capita="$7,806",
        internet_users="57M", urbanization_pct=51, median_age=40.1,
        highlight="Tourism gateway and stable economy with mature manufacturing and logistics infrastructure.",
    ),
    MarketRecord(
        id="singapore", country="Singapore", population="5.9M", gdp="$397B",
        market_size_usd=89.6, growth_pct=2.6, digital_penetration_pct=92,
        data_source=_SOURCE, market_size="$89.6B", gdp_per_capita="$65,233",
        internet_users="5.2M", urbanization_pct=100, median_age=42.2,
        highlight="Regional headquarters and innovation hub with the highest digital adoption in Southeast Asia.",
    ),
    MarketRecord(
        id="malaysia", country="Malaysia", population="32.7M", gdp="$432B",
        market_size_usd=98.3, growth_pct=4.5, digital_penetration_pct=78,
        data_source=_SOURCE, market_size="$98.3B", gdp_per_capita="$11,373",
        internet_users="26M", urbanization_pct=77, median_age=30.3,
        highlight="Islamic finance hub at a strategic location on regional shipping lanes.",
    ),
    MarketRecord(
        id="vietnam", country="Vietnam", population="97.3M", gdp="$409B",
        market_size_usd=142.1, growth_pct=6.8, digital_penetration_pct=75,
        data_source=_SOURCE, market_size="$142.1B", gdp_per_capita="$4,164",
        internet_users="75M", urbanization_pct=37, median_age=32.5,
        highlight="Fastest growing economy in the region and an export-oriented manufacturing hub.",
    ),
    MarketRecord(
        id="philippines", country="Philippines", population="109.6M", gdp="$394B",
        market_size_usd=156.8, growth_pct=6.2, digital_penetration_pct=68,
        data_source=_SOURCE, market_size="$156.8B", gdp_per_capita="$3,485",
        internet_users="73M", urbanization_pct=47, median_age=25.7,
        highlight="English proficiency and a deep BPO ecosystem backed by a young workforce.",
    ),
)

_INDUSTRIES: Tuple[IndustryRecord, ...] = (
    IndustryRecord(
        id="technology", name="Technology & Software", market_size_usd=89.2, growth_pct=12.4,
        competition_level=CompetitionLevel.HIGH, opportunity_score=85, source="e-Conomy SEA 2024",
        market_size="$89.2B", trends=("AI/ML adoption", "Cloud migration", "Mobile-first solutions"),
    ),
    IndustryRecord(
        id="ecommerce", name="E-commerce & Retail", market_size_usd=156.7, growth_pct=18.6,
        competition_level=CompetitionLevel.HIGH, opportunity_score=78, source="e-Conomy SEA 2024",
        market_size="$156.7B", trends=("Social commerce", "Cross-border trade", "Sustainability focus"),
    ),
    IndustryRecord(
        id="fintech", name="Financial Services", market_size_usd=67.3, growth_pct=15.2,
        competition_level=CompetitionLevel.MEDIUM, opportunity_score=92, source="ASEAN Fintech Census",
        market_size="$67.3B", trends=("Digital banking", "Cryptocurrency", "SME lending"),
    ),
    IndustryRecord(
        id="automotive", name="Automotive", market_size_usd=45.8, growth_pct=8.3,
        competition_level=CompetitionLevel.MEDIUM, opportunity_score=71, source="ASEAN Automotive Federation",
        market_size="$45.8B", trends=("Electric vehicles", "Ride-sharing", "Autonomous driving"),
    ),
    IndustryRecord(
        id="healthcare", name="Healthcare & Pharma", market_size_usd=78.4, growth_pct=9.7,
        competition_level=CompetitionLevel.LOW, opportunity_score=88, source="WHO, national health ministries",
        market_size="$78.4B", trends=("Telemedicine", "Digital therapeutics", "Personalized medicine"),
    ),
    IndustryRecord(
        id="manufacturing", name="Manufacturing", market_size_usd=234.1, growth_pct=6.8,
        competition_level=CompetitionLevel.MEDIUM, opportunity_score=65, source="UNIDO, national statistics",
        market_size="$234.1B", trends=("Industry 4.0", "Supply chain optimization", "Green manufacturing"),
    ),
)

_CITIES: Tuple[CityRecord, ...] = (
    CityRecord(
        id="bangkok", name="Bangkok", country="thailand", population="10.7M", gdp_per_capita="$7,800",
        digital_infrastructure=85, business_environment=78, cost_of_living="Medium",
        key_industries=("Tourism", "Manufacturing", "Financial Services", "Technology"),
        opportunities=("Digital payments", "E-commerce logistics", "Smart city solutions"),
        challenges=("Traffic congestion", "Air pollution", "Regulatory complexity"),
    ),
    CityRecord(
        id="singapore-city", name="Singapore", country="singapore", population="5.9M", gdp_per_capita="$65,200",
        digital_infrastructure=95, business_environment=95, cost_of_living="High",
        key_industries=("Financial Services", "Technology", "Logistics", "Biotech"),
        opportunities=("Fintech innovation", "Sustainable technology", "Regional headquarters"),
        challenges=("High operational costs", "Talent competition", "Limited domestic market"),
    ),
    CityRecord(
        id="kuala-lumpur", name="Kuala Lumpur", country="malaysia", population="7.9M", gdp_per_capita="$11,200",
        digital_infrastructure=82, business_environment=73, cost_of_living="Medium",
        key_industries=("Palm Oil", "Technology", "Islamic Finance", "Manufacturing"),
        opportunities=("Islamic fintech", "Halal products", "Digital transformation"),
        challenges=("Political stability", "Skills gap", "Infrastructure development"),
    ),
    CityRecord(
        id="jakarta", name="Jakarta", country="indonesia", population="34.5M", gdp_per_capita="$4,200",
        digital_infrastructure=75, business_environment=68, cost_of_living="Low",
        key_industries=("Manufacturing", "Agriculture", "Mining", "Technology"),
        opportunities=("Mobile commerce", "Digital banking", "Logistics solutions"),
        challenges=("Infrastructure gaps", "Regulatory hurdles", "Traffic congestion"),
    ),
    CityRecord(
        id="manila", name="Manila", country="philippines", population="25.0M", gdp_per_capita="$3,500",
        digital_infrastructure=72, business_environment=65, cost_of_living="Low",
        key_industries=("BPO", "Manufacturing", "Agriculture", "Tourism"),
        opportunities=("Digital services", "Remittance solutions", "E-commerce"),
        challenges=("Infrastructure quality", "Natural disasters", "Regulatory complexity"),
    ),
    CityRecord(
        id="ho-chi-minh", name="Ho Chi Minh City", country="vietnam", population="13.3M", gdp_per_capita="$4,100",
        digital_infrastructure=78, business_environment=70, cost_of_living="Low",
        key_industries=("Manufacturing", "Technology", "Textiles", "Agriculture"),
        opportunities=("Manufacturing hub", "Tech outsourcing", "Consumer goods"),
        challenges=("Infrastructure development", "Skills training", "Environmental concerns"),
    ),
)

_DIGITAL: Tuple[DigitalMetrics, ...] = (
    DigitalMetrics("singapore", 89, 92, 78, 85, 85, 72, 67),
    DigitalMetrics("thailand", 82, 85, 65, 72, 76, 58, 54),
    DigitalMetrics("malaysia", 84, 78, 58, 68, 81, 54, 49),
    DigitalMetrics("indonesia", 71, 73, 52, 61, 68, 45, 43),
    DigitalMetrics("philippines", 67, 68, 45, 55, 72, 41, 38),
    DigitalMetrics("vietnam", 77, 75, 49, 58, 74, 43, 41),
)

_CONSUMER: Tuple[ConsumerStat, ...] = (
    ConsumerStat("Mobile-First Shopping", "78%", "+24%", "Prefer mobile apps over desktop"),
    ConsumerStat("Social Commerce Influence", "65%", "+32%", "Purchase decisions driven by social media"),
    ConsumerStat("Digital Payment Adoption", "72%", "+29%", "Cash-to-digital transition accelerating"),
    ConsumerStat("Cross-border Shopping", "43%", "+18%", "International brands via e-commerce"),
)


class ReferenceData:
    """Read-only lookup over one fixture snapshot"""

    def __init__(
        self,
        markets: Tuple[MarketRecord, ...] = _MARKETS,
        industries: Tuple[IndustryRecord, ...] = _INDUSTRIES,
        cities: Tuple[CityRecord, ...] = _CITIES,
        digital: Tuple[DigitalMetrics, ...] = _DIGITAL,
        consumer: Tuple[ConsumerStat, ...] = _CONSUMER,
        version: str = SNAPSHOT_VERSION,
    ):
        self.version = version
        self._markets: Dict[str, MarketRecord] = {m.id: m for m in markets}
        self._industries: Dict[str, IndustryRecord] = {i.id: i for i in industries}
        self._cities: Dict[str, CityRecord] = {c.id: c for c in cities}
        self._digital: Dict[str, DigitalMetrics] = {d.country: d for d in digital}
        self._consumer = tuple(consumer)

    @staticmethod
    def _key(record_id: Optional[str]) -> str:
        return (record_id or "").strip().lower()

    def lookup(self, country_id: str) -> Optional[MarketRecord]:
        """Market record for a country id, or None when the id is unknown"""
        return self._markets.get(self._key(country_id))

    def lookup_industry(self, industry_id: str) -> Optional[IndustryRecord]:
        return self._industries.get(self._key(industry_id))

    def lookup_city(self, city_id: str) -> Optional[CityRecord]:
        return self._cities.get(self._key(city_id))

    def digital_metrics(self, country_id: str) -> Optional[DigitalMetrics]:
        return self._digital.get(self._key(country_id))

    def markets(self) -> List[MarketRecord]:
        return list(self._markets.values())

    def industries(self) -> List[IndustryRecord]:
        return list(self._industries.values())

    def cities(self) -> List[CityRecord]:
        return list(self._cities.values())

    def consumer_stats(self) -> List[ConsumerStat]:
        return list(self._consumer)

    def scope(self, country_ids) -> List[MarketRecord]:
        """
        Records for the given ids in the given order, skipping misses.
        An empty selection means the whole region.
        """
        if not country_ids:
            return self.markets()
        found = (self.lookup(cid) for cid in country_ids)
        return [record for record in found if record is not None]
