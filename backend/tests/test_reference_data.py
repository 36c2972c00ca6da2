"""Tests for the bundled reference snapshot."""

import pytest

from flow.services.reference_data import (
    SNAPSHOT_VERSION, CompetitionLevel, MarketRecord, ReferenceData,
)


class TestLookup:
    def test_known_country(self, reference):
        record = reference.lookup("indonesia")
        assert record.country == "Indonesia"
        assert record.market_size == "$287.2B"
        assert record.growth_pct == pytest.approx(5.2)

    def test_lookup_is_case_insensitive(self, reference):
        assert reference.lookup("  SingaPore ") == reference.lookup("singapore")

    def test_unknown_country_is_none(self, reference):
        assert reference.lookup("atlantis") is None
        assert reference.lookup("") is None
        assert reference.lookup(None) is None

    def test_city_and_industry_lookup(self, reference):
        assert reference.lookup_city("bangkok").country == "thailand"
        assert reference.lookup_industry("fintech").competition_level is CompetitionLevel.MEDIUM
        assert reference.lookup_city("paris") is None

    def test_digital_metrics(self, reference):
        metrics = reference.digital_metrics("Singapore")
        assert metrics.internet_pct == 89
        assert reference.digital_metrics("atlantis") is None


class TestCollections:
    def test_six_markets(self, reference):
        ids = [m.id for m in reference.markets()]
        assert ids == ["indonesia", "thailand", "singapore", "malaysia", "vietnam", "philippines"]

    def test_every_market_has_digital_metrics(self, reference):
        for market in reference.markets():
            assert reference.digital_metrics(market.id) is not None

    def test_every_city_points_at_a_market(self, reference):
        for city in reference.cities():
            assert reference.lookup(city.country) is not None

    def test_opportunity_scores_in_range(self, reference):
        for industry in reference.industries():
            assert 0 <= industry.opportunity_score <= 100

    def test_records_are_immutable(self, reference):
        record = reference.lookup("vietnam")
        with pytest.raises(Exception):
            record.growth_pct = 99

    def test_version(self, reference):
        assert reference.version == SNAPSHOT_VERSION


class TestScope:
    def test_empty_selection_is_whole_region(self, reference):
        assert len(reference.scope(())) == 6

    def test_keeps_selection_order_and_skips_misses(self, reference):
        scoped = reference.scope(["vietnam", "atlantis", "indonesia"])
        assert [m.id for m in scoped] == ["vietnam", "indonesia"]

    def test_custom_snapshot(self):
        record = MarketRecord(
            id="brunei", country="Brunei", population="0.4M", gdp="$15B",
            market_size_usd=4.0, growth_pct=1.1, digital_penetration_pct=95, data_source="test",
        )
        data = ReferenceData(markets=(record,), version="test")
        assert data.lookup("brunei") is record
        assert data.lookup("indonesia") is None
