"""
Layout Composer - builds the market intelligence report and the professional
deck on a DocumentCanvas.

Report: cover, executive summary, market overview, per-country cards, city
profiles, industry ranking, digital adoption, consumer behavior and the entry
roadmap, then a footer pass over every page.
Deck: landscape, always eight slides.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, List, NamedTuple, Optional, Sequence, Tuple

from .canvas import RGB, DocumentCanvas
from .layout import (
    BODY, CARD_TITLE, COLORS, LABEL, SMALL, SUBHEADING,
    PageFlow, PageGeometry, TextStyle, mix, palette_color, tint,
)
from .reference_data import CityRecord, MarketRecord, ReferenceData

if TYPE_CHECKING:
    from .export_service import ExportRequest

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"

EXECUTIVE_INSIGHTS = (
    "Southeast Asia represents a $3.7T combined economy with 680M+ consumers, offering unprecedented "
    "market entry opportunities across multiple high-growth sectors.",
    "Digital economy growing at 18.6% annually, driven by mobile-first adoption and e-commerce "
    "expansion across all six major markets.",
    "Indonesia, Vietnam, and Philippines show strongest growth trajectories (5-7% GDP growth) with "
    "favorable demographics and urbanization trends.",
    "Regional trade integration through ASEAN creates simplified market access and reduced barriers "
    "for cross-border expansion strategies.",
)

RECOMMENDATION = (
    "Strategic market entry with phased approach: Indonesia first (scale), Vietnam/Philippines "
    "(growth), Singapore (premium hub)."
)

DIGITAL_INSIGHTS = (
    "Mobile-first approach critical: 85% of users access internet via mobile",
    "E-commerce growing 25% annually across all markets",
    "Digital payment adoption accelerated 300% (2020-2024)",
    "Super apps (Grab, Gojek) driving financial inclusion",
)

ROADMAP_PHASES = (
    ("Phase 1: Foundation", "0-6 Months", (
        "Establish presence in primary market (Indonesia or Singapore)",
        "Secure regulatory approvals and local partnerships",
        "Conduct detailed market research and consumer studies",
        "Build local team with regional expertise",
    )),
    ("Phase 2: Expansion", "6-18 Months", (
        "Launch operations in Vietnam and Philippines",
        "Scale primary market beyond initial region",
        "Develop localized products and services",
        "Establish regional supply chain network",
    )),
    ("Phase 3: Optimization", "18-36 Months", (
        "Enter Thailand and Malaysia markets",
        "Establish Singapore regional headquarters",
        "Achieve profitability in all primary markets",
        "Explore strategic acquisition opportunities",
    )),
)

INVESTMENT_SUMMARY = (
    "Total Investment Required: $50-75M over 3 years",
    "Expected ROI: 25-30% by Year 3",
)

MISSION = ("Empowering businesses with data-driven insights and comprehensive market intelligence "
           "to successfully enter and scale in Southeast Asian markets.")
VISION = ("To become the leading market intelligence platform for Southeast Asia, enabling seamless "
          "market entry and sustainable growth for businesses of all sizes.")

CHALLENGES = (
    ("Market Complexity", ("Diverse regulations across countries", "Cultural and linguistic differences",
                           "Varying consumer behaviors")),
    ("Data Fragmentation", ("Inconsistent market data", "Limited real-time insights",
                            "Difficult competitive analysis")),
)
REAL_WORLD_IMPACT = (
    "Failed market entries due to poor research",
    "Millions lost in misaligned strategies",
    "Missed opportunities in high-growth markets",
    "Delayed expansion timelines",
)

SOLUTION_FEATURES = (
    ("Live Market Data", "Real-time stock indices, economic indicators, and currency rates"),
    ("Smart Analytics", "AI-powered insights and predictive market analysis"),
    ("Mobile-First", "Access anywhere, anytime with responsive design"),
    ("Secure & Reliable", "Enterprise-grade security and data integrity"),
)
PLATFORM_BENEFITS = (
    "Comprehensive market coverage",
    "Data-driven decision making",
    "Reduced market entry risk",
    "Faster time to market",
    "Competitive intelligence",
    "ROI tracking and optimization",
)

INNOVATIVE_FEATURES = (
    ("Live Market Tracking", "Real-time stock market indices, economic indicators, and currency exchange "
                             "rates across 6 Southeast Asian markets."),
    ("Country Analytics", "Deep-dive analysis for Indonesia, Thailand, Singapore, Malaysia, Philippines, "
                          "and Vietnam with city-level insights."),
    ("Industry Intelligence", "Sector-specific insights for technology, e-commerce, fintech, manufacturing, "
                              "and emerging industries."),
    ("Professional Reports", "Generate consulting-grade reports and presentation decks with one click for "
                             "board meetings and stakeholders."),
)

DIFFERENTIATORS = (
    ("Comprehensive Coverage", "First platform combining live market data, economic indicators, and "
                               "business intelligence"),
    ("Real-Time Insights", "Live stock indices, currency rates, and market status updated every 5 minutes"),
    ("Professional Grade", "Consulting-quality reports and presentations generated instantly"),
)
PLATFORM_IMPACT = (
    ("6 Countries", "Markets Covered"),
    ("1000+", "Data Points"),
    ("5 Minutes", "Update Frequency"),
    ("10+", "Report Types"),
)

IMPACT_PHASES = (
    ("Market Research Phase", "Comprehensive analysis across all Southeast Asian markets with real-time "
                              "data access and competitive intelligence."),
    ("Strategic Planning", "Data-driven market entry strategy development with risk assessment and "
                           "opportunity identification."),
    ("Execution & Scale", "Implementation support with ongoing market monitoring, performance tracking, "
                          "and optimization insights."),
)

CALL_TO_ACTION = (
    ("Expert Team", "Market analysts & data scientists"),
    ("Proven Data", "World Bank, IMF, real-time APIs"),
    ("Fast Results", "Instant reports & insights"),
)
CLOSING_QUOTE = (
    '"Together, we\'re building data-driven market entry strategies',
    'that unlock Southeast Asia\'s tremendous growth potential."',
)

DECK_SLIDES = (
    "Title", "Mission & Vision", "The Challenge", "Our Solution",
    "Innovative Features", "Differentiators", "Measurable Impact", "Get Started",
)


class CityCard(NamedTuple):
    """A measured city profile, ready to draw"""
    title: str
    fact_lines: List[str]
    scores: List[Tuple[str, int]]
    detail_lines: List[str]
    height: float


def display_name(country_id: str) -> str:
    """Country id with its first letter upper-cased"""
    return country_id[:1].upper() + country_id[1:]


def _wrap(canvas: DocumentCanvas, text: str, style: TextStyle, width: float) -> List[str]:
    canvas.set_font(style.weight, style.size)
    return canvas.wrap_text(text, width)


def _clamp(lines: List[str], max_lines: int) -> List[str]:
    if len(lines) <= max_lines:
        return lines
    kept = lines[:max_lines]
    kept[-1] = kept[-1].rstrip(" .,") + " ..."
    return kept


def _draw_lines(canvas: DocumentCanvas, lines: Sequence[str], x: float, top: float, style: TextStyle,
                align: str = "left") -> float:
    """Draw lines from a top edge downward, returning the bottom edge"""
    canvas.set_font(style.weight, style.size)
    canvas.set_text_color(style.color)
    y = top
    for line in lines:
        canvas.draw_text(line, x, y + style.ascent, align=align)
        y += style.line_height
    return y


class LayoutComposer:
    """Composes PDF documents from a request and the reference tables"""

    def __init__(self, reference: ReferenceData, brand: str = "FLOW"):
        self.reference = reference
        self.brand = brand

    # ================================================================ REPORT

    def build_report(self, request: "ExportRequest", generated_at: datetime) -> DocumentCanvas:
        canvas = DocumentCanvas(
            orientation="portrait",
            title="Flow Market Intelligence Report",
            created_at=generated_at,
        )
        flow = PageFlow(canvas, PageGeometry.for_canvas(canvas, margin=20.0), brand=self.brand)
        scope = self.reference.scope(request.selected_countries)

        self._add_cover(flow, request, scope, generated_at)
        self._add_executive_summary(flow, scope)
        self._add_market_overview(flow, scope)
        self._add_country_cards(flow, request.selected_countries)
        self._add_city_profiles(flow, request.selected_cities)
        self._add_industry_ranking(flow)
        self._add_digital_adoption(flow, scope)
        self._add_consumer_behavior(flow)
        self._add_roadmap(flow)
        self._stamp_footers(canvas, flow.geometry, generated_at)

        logger.info(
            "Composed report: %d pages, %d countries, %d cities",
            canvas.page_count, len(request.selected_countries), len(request.selected_cities),
        )
        return canvas

    @staticmethod
    def _scope_metrics(scope: Sequence[MarketRecord]) -> List[Tuple[str, str, str]]:
        if not scope:
            return [
                ("Markets in Scope", "0", "No reference data"),
                ("Combined Market", NOT_AVAILABLE, "USD"),
                ("Avg GDP Growth", NOT_AVAILABLE, "Annual"),
                ("Avg Digital Penetration", NOT_AVAILABLE, "Population"),
            ]
        total = sum(m.market_size_usd for m in scope)
        growth = sum(m.growth_pct for m in scope) / len(scope)
        digital = sum(m.digital_penetration_pct for m in scope) / len(scope)
        return [
            ("Markets in Scope", str(len(scope)), "Southeast Asia"),
            ("Combined Market", f"${total:,.1f}B", "USD"),
            ("Avg GDP Growth", f"{growth:.1f}%", "Annual"),
            ("Avg Digital Penetration", f"{digital:.0f}%", "Population"),
        ]

    def _focus_text(self, ids: Sequence[str], lookup, empty: str) -> str:
        if not ids:
            return empty
        names = []
        for record_id in ids:
            record = lookup(record_id)
            names.append(record.name if isinstance(record, CityRecord) else
                         record.country if record is not None else display_name(record_id))
        return " | ".join(names)

    def _metric_boxes(self, flow: PageFlow, metrics: Sequence[Tuple[str, str, str]],
                      dark: bool = False, height: float = 24.0):
        g = flow.geometry
        flow.ensure_space(height)
        canvas = flow.canvas
        gap = 4.0
        box_w = (g.content_width - gap * (len(metrics) - 1)) / len(metrics)
        y = flow.cursor.current_y
        for index, (label, value, note) in enumerate(metrics):
            color = palette_color(index)
            x = g.content_left + index * (box_w + gap)
            canvas.set_fill_color(mix(color, COLORS["dark"], 0.7) if dark else tint(color))
            canvas.draw_rounded_rect(x, y, box_w, height, 2)
            canvas.set_font("normal", 7.5)
            canvas.set_text_color(COLORS["light_gray"] if dark else COLORS["slate"])
            canvas.draw_text(flow.fit(label, box_w - 4), x + 2.5, y + 6)
            canvas.set_font("bold", 14)
            canvas.set_text_color(COLORS["white"] if dark else color)
            canvas.draw_text(flow.fit(value, box_w - 4), x + 2.5, y + 15)
            canvas.set_font("normal", 7)
            canvas.set_text_color(COLORS["light_gray"])
            canvas.draw_text(flow.fit(note, box_w - 4), x + 2.5, y + 21)
        flow.cursor.advance(height + 6)

    def _callout(self, flow: PageFlow, title: str, lines_text: Sequence[str], color: RGB, bulleted: bool = False):
        """Tinted box with a bold title, measured to fit on one page"""
        g = flow.geometry
        width = g.content_width - 10
        lines: List[str] = []
        for text in lines_text:
            wrapped = _wrap(flow.canvas, text, BODY, width - (4 if bulleted else 0))
            if bulleted and wrapped:
                wrapped = ["- " + wrapped[0]] + ["  " + line for line in wrapped[1:]]
            lines.extend(wrapped)
        height = 5 + LABEL.line_height + 2 + len(lines) * BODY.line_height + 4
        flow.ensure_space(height)
        y = flow.cursor.current_y
        flow.canvas.set_fill_color(tint(color))
        flow.canvas.draw_rounded_rect(g.content_left, y, g.content_width, height, 2)
        flow.canvas.set_fill_color(color)
        flow.canvas.draw_rect(g.content_left, y, 1.5, height)
        flow.cursor.advance(5)
        flow.write_lines([title], TextStyle(11, "bold", color, LABEL.line_height), x=g.content_left + 5)
        flow.spacer(2)
        flow.write_lines(lines, BODY, x=g.content_left + 5)
        flow.cursor.current_y = y + height + 6

    # ----------------------------------------------------------------- cover

    def _add_cover(self, flow: PageFlow, request, scope, generated_at: datetime):
        canvas, g = flow.canvas, flow.geometry
        canvas.add_page()
        canvas.set_fill_color(COLORS["dark"])
        canvas.draw_rect(0, 0, g.width, g.height)
        for i in range(10):
            canvas.set_fill_color(mix(COLORS["accent"], COLORS["dark"], 0.9 - i * 0.05))
            canvas.draw_circle(g.width - 30, 40, 50 - i * 2)
        canvas.set_fill_color(COLORS["primary"])
        canvas.draw_rect(0, 0, g.width, 12)
        canvas.mark_section("Cover")

        flow.cursor.current_y = 22
        flow.write_lines([self.brand], TextStyle(28, "bold", COLORS["white"], 12))
        flow.write_lines(["Market Intelligence Platform"], TextStyle(12, "normal", COLORS["light_gray"], 6))
        flow.spacer(30)

        title_style = TextStyle(30, "bold", COLORS["white"], 13)
        flow.write_lines(flow.measure("Southeast Asian Market Entry Strategy", title_style, g.content_width),
                         title_style)
        flow.spacer(3)
        flow.write_lines(["Comprehensive Market Analysis & Strategic Intelligence"],
                         TextStyle(13, "normal", COLORS["light_gray"], 7))
        flow.spacer(8)

        focus_style = TextStyle(11, "normal", COLORS["white"], 6)
        markets = self._focus_text(request.selected_countries, self.reference.lookup, "All Southeast Asian Markets")
        flow.write_lines(flow.measure(f"Focus Markets: {markets}", focus_style, g.content_width), focus_style)
        if request.selected_cities:
            cities = self._focus_text(request.selected_cities, self.reference.lookup_city, "")
            flow.write_lines(flow.measure(f"Focus Cities: {cities}", focus_style, g.content_width), focus_style)
        flow.spacer(4)
        canvas.set_fill_color(COLORS["primary"])
        canvas.draw_rect(g.content_left, flow.cursor.current_y, g.content_width - 20, 2)
        flow.spacer(8)

        meta_style = TextStyle(10, "normal", COLORS["light_gray"], 6)
        flow.write_lines([
            f"Generated: {generated_at.strftime('%B %d, %Y')}",
            f"Data snapshot: {self.reference.version}",
        ], meta_style)

        box_top = g.content_bottom - 24
        if flow.cursor.current_y + 6 < box_top:
            flow.cursor.current_y = box_top
        self._metric_boxes(flow, self._scope_metrics(scope), dark=True)

    # ------------------------------------------------------ executive summary

    def _add_executive_summary(self, flow: PageFlow, scope):
        flow.new_page("Executive Summary")
        flow.section_header("Executive Summary", COLORS["primary"])
        self._metric_boxes(flow, self._scope_metrics(scope))

        flow.write_lines(["Key Strategic Insights"], TextStyle(14, "bold", COLORS["primary"], 8))
        flow.spacer(2)
        for index, insight in enumerate(EXECUTIVE_INSIGHTS, 1):
            flow.paragraph(f"{index}. {insight}", BODY, after=3)
        flow.spacer(3)
        self._callout(flow, "RECOMMENDATION: PROCEED", [RECOMMENDATION], COLORS["secondary"])

    # -------------------------------------------------------- market overview

    def _add_market_overview(self, flow: PageFlow, scope: Sequence[MarketRecord]):
        flow.new_page("Market Overview")
        flow.section_header("Market Overview", COLORS["primary"])
        if not scope:
            flow.paragraph("No reference data is available for the selected markets.", BODY)
            return

        g = flow.geometry
        canvas = flow.canvas
        cols, gap, box_h = 3, 4.0, 22.0
        box_w = (g.content_width - gap * (cols - 1)) / cols
        for start in range(0, len(scope), cols):
            flow.ensure_space(box_h)
            y = flow.cursor.current_y
            for offset, record in enumerate(scope[start:start + cols]):
                color = palette_color(start + offset)
                x = g.content_left + offset * (box_w + gap)
                canvas.set_fill_color(tint(color))
                canvas.draw_rounded_rect(x, y, box_w, box_h, 2)
                canvas.set_font("bold", 10)
                canvas.set_text_color(COLORS["dark"])
                canvas.draw_text(record.country, x + 3, y + 6)
                canvas.set_font("bold", 13)
                canvas.set_text_color(color)
                canvas.draw_text(record.market_size, x + 3, y + 13.5)
                canvas.set_font("normal", 7.5)
                canvas.set_text_color(COLORS["slate"])
                canvas.draw_text(f"Growth {record.growth_pct:.1f}% | Digital {record.digital_penetration_pct:.0f}%",
                                 x + 3, y + 19)
            flow.cursor.advance(box_h + 4)

        flow.spacer(2)
        flow.write_lines(["Country Comparison Matrix"], SUBHEADING)
        flow.spacer(2)
        flow.table(
            ["Country", "Population", "GDP", "Market Size", "Growth %", "Digital %"],
            [[m.country, m.population, m.gdp, m.market_size, f"{m.growth_pct:.1f}%",
              f"{m.digital_penetration_pct:.0f}%"] for m in scope],
            [35, 27, 27, 29, 26, 26],
        )

        flow.write_lines(["Top Markets by Market Size"], SUBHEADING)
        flow.spacer(2)
        largest = max(m.market_size_usd for m in scope) or 1.0
        bar_area = g.content_width - 45
        for index, record in enumerate(sorted(scope, key=lambda m: m.market_size_usd, reverse=True)):
            flow.ensure_space(10)
            y = flow.cursor.current_y
            width = bar_area * record.market_size_usd / largest
            canvas.set_fill_color(palette_color(index))
            canvas.draw_rounded_rect(g.content_left + 40, y, max(width, 2), 8, 1)
            canvas.set_font("bold", 9)
            canvas.set_text_color(COLORS["dark_gray"])
            canvas.draw_text(record.country, g.content_left, y + 5.5)
            canvas.set_text_color(COLORS["white"] if width > 25 else COLORS["dark_gray"])
            canvas.draw_text(record.market_size, g.content_left + 43 if width > 25 else g.content_left + 43 + width,
                             y + 5.5)
            flow.cursor.advance(10)
        flow.spacer(3)
        flow.paragraph(f"Data sources: {scope[0].data_source} | Snapshot {self.reference.version}", SMALL)

    # ---------------------------------------------------------- country cards

    def _add_country_cards(self, flow: PageFlow, country_ids: Sequence[str]):
        flow.new_page("Country Deep Dive")
        flow.section_header("Country Deep Dive", COLORS["accent"])
        if not country_ids:
            flow.paragraph("No countries selected. Select one or more markets to include detailed country cards.",
                           BODY)
            return
        for index, country_id in enumerate(country_ids):
            self._country_card(flow, index, country_id, self.reference.lookup(country_id))

    def _country_card(self, flow: PageFlow, index: int, country_id: str, record: Optional[MarketRecord]):
        g = flow.geometry
        canvas = flow.canvas
        color = palette_color(index)
        name = record.country if record is not None else display_name(country_id)
        if record is not None:
            fields = [
                ("Population", record.population), ("GDP", record.gdp),
                ("Market Size", record.market_size), ("GDP Growth", f"{record.growth_pct:.1f}%"),
                ("GDP per Capita", record.gdp_per_capita),
                ("Digital Penetration", f"{record.digital_penetration_pct:.0f}%"),
                ("Internet Users", record.internet_users), ("Median Age", f"{record.median_age:.1f}"),
            ]
            note = record.highlight
        else:
            fields = [(label, NOT_AVAILABLE) for label in (
                "Population", "GDP", "Market Size", "GDP Growth",
                "GDP per Capita", "Digital Penetration", "Internet Users", "Median Age")]
            note = "No reference data available for this market."

        note_lines = _wrap(canvas, note, SMALL, g.content_width - 10)
        field_rows = (len(fields) + 1) // 2
        height = 10 + 4 + field_rows * 6 + 2 + len(note_lines) * SMALL.line_height + 4
        flow.ensure_space(height)
        canvas.mark_section(f"{index + 1}. {name}", level=1)

        y = flow.cursor.current_y
        canvas.set_fill_color(tint(color, 0.92))
        canvas.draw_rounded_rect(g.content_left, y, g.content_width, height, 2)
        canvas.set_fill_color(color)
        canvas.draw_rounded_rect(g.content_left, y, g.content_width, 10, 2)
        canvas.set_font(CARD_TITLE.weight, CARD_TITLE.size)
        canvas.set_text_color(CARD_TITLE.color)
        canvas.draw_text(f"{index + 1}. {name}", g.content_left + 4, y + 7)

        col_w = g.content_width / 2
        for i, (label, value) in enumerate(fields):
            x = g.content_left + 4 + (i % 2) * col_w
            baseline = y + 10 + 4 + (i // 2) * 6 + 4
            canvas.set_font("bold", 9)
            canvas.set_text_color(COLORS["slate"])
            canvas.draw_text(f"{label}:", x, baseline)
            canvas.set_font("normal", 9)
            canvas.set_text_color(COLORS["dark"])
            canvas.draw_text(value, x + 36, baseline)

        flow.cursor.current_y = y + 10 + 4 + field_rows * 6 + 2
        flow.write_lines(note_lines, SMALL, x=g.content_left + 4)
        flow.cursor.current_y = y + height + 5

    # --------------------------------------------------------- city profiles

    def _add_city_profiles(self, flow: PageFlow, city_ids: Sequence[str]):
        if not city_ids:
            return
        cards = [self._measure_city_card(flow, city_id, self.reference.lookup_city(city_id))
                 for city_id in city_ids]
        flow.spacer(4)
        flow.section_header("City Profiles", COLORS["secondary"], keep_with=cards[0].height)
        for index, card in enumerate(cards):
            self._city_card(flow, index, card)

    def _measure_city_card(self, flow: PageFlow, city_id: str, city: Optional[CityRecord]) -> CityCard:
        canvas = flow.canvas
        width = flow.geometry.content_width - 10
        if city is not None:
            country = self.reference.lookup(city.country)
            title = f"{city.name}, {country.country if country else display_name(city.country)}"
            facts = (f"Population {city.population} | GDP per capita {city.gdp_per_capita} | "
                     f"Cost of living {city.cost_of_living}")
            scores = [("Digital Infrastructure", city.digital_infrastructure),
                      ("Business Environment", city.business_environment)]
            details = [
                f"Key industries: {', '.join(city.key_industries)}",
                f"Opportunities: {', '.join(city.opportunities)}",
                f"Challenges: {', '.join(city.challenges)}",
            ]
        else:
            title = display_name(city_id)
            facts = "No reference data available for this city."
            scores = []
            details = []

        fact_lines = _wrap(canvas, facts, SMALL, width)
        detail_lines: List[str] = []
        for text in details:
            detail_lines.extend(_wrap(canvas, text, SMALL, width))
        height = 10 + 3 + len(fact_lines) * SMALL.line_height + len(scores) * 7 + \
            len(detail_lines) * SMALL.line_height + 5
        return CityCard(title, fact_lines, scores, detail_lines, height)

    def _city_card(self, flow: PageFlow, index: int, card: CityCard):
        g = flow.geometry
        canvas = flow.canvas
        color = palette_color(index + 1)
        title, fact_lines, scores, detail_lines, height = card
        flow.ensure_space(height)

        y = flow.cursor.current_y
        canvas.set_fill_color(tint(color, 0.92))
        canvas.draw_rounded_rect(g.content_left, y, g.content_width, height, 2)
        canvas.set_fill_color(color)
        canvas.draw_rounded_rect(g.content_left, y, g.content_width, 10, 2)
        canvas.set_font(CARD_TITLE.weight, CARD_TITLE.size)
        canvas.set_text_color(CARD_TITLE.color)
        canvas.draw_text(title, g.content_left + 4, y + 7)

        flow.cursor.current_y = y + 13
        flow.write_lines(fact_lines, SMALL, x=g.content_left + 4)
        for label, score in scores:
            row_y = flow.cursor.current_y
            canvas.set_font("bold", 8.5)
            canvas.set_text_color(COLORS["slate"])
            canvas.draw_text(label, g.content_left + 4, row_y + 4.5)
            bar_x, bar_w = g.content_left + 50, g.content_width - 70
            canvas.set_fill_color(COLORS["border"])
            canvas.draw_rounded_rect(bar_x, row_y + 1.5, bar_w, 4, 1)
            canvas.set_fill_color(color)
            canvas.draw_rounded_rect(bar_x, row_y + 1.5, bar_w * score / 100, 4, 1)
            canvas.set_text_color(COLORS["dark"])
            canvas.draw_text(f"{score}/100", g.content_left + g.content_width - 4, row_y + 4.5, align="right")
            flow.cursor.advance(7)
        flow.write_lines(detail_lines, SMALL, x=g.content_left + 4)
        flow.cursor.current_y = y + height + 5

    # ------------------------------------------------------ industry ranking

    def _add_industry_ranking(self, flow: PageFlow):
        flow.new_page("Industry Analysis")
        flow.section_header("Industry Opportunity Ranking", COLORS["accent"])
        ranked = sorted(self.reference.industries(), key=lambda i: i.opportunity_score, reverse=True)
        flow.table(
            ["Rank", "Industry", "Market Size", "Growth", "Competition", "Opportunity"],
            [[str(rank), ind.name, ind.market_size, f"{ind.growth_pct:.1f}%",
              ind.competition_level.value, f"{ind.opportunity_score}/100"]
             for rank, ind in enumerate(ranked, 1)],
            [14, 50, 28, 22, 28, 28],
            color=COLORS["accent"],
        )
        flow.write_lines(["Key Industry Trends"], SUBHEADING)
        flow.spacer(2)
        flow.bullets([f"{ind.name}: {', '.join(ind.trends)}" for ind in ranked], BODY)
        flow.paragraph("Sources: " + "; ".join(sorted({ind.source for ind in ranked})), SMALL)

    # ------------------------------------------------------ digital adoption

    def _add_digital_adoption(self, flow: PageFlow, scope: Sequence[MarketRecord]):
        flow.new_page("Digital Economy")
        flow.section_header("Digital Adoption", COLORS["secondary"])
        g = flow.geometry
        canvas = flow.canvas
        shown = 0
        for record in scope:
            metrics = self.reference.digital_metrics(record.id)
            if metrics is None:
                continue
            color = palette_color(shown)
            bars = [("Internet", metrics.internet_pct), ("Mobile", metrics.mobile_pct),
                    ("E-commerce", metrics.ecommerce_pct), ("Digital Payments", metrics.digital_payments_pct)]
            height = 10 + 3 + len(bars) * 6 + SMALL.line_height + 4
            flow.ensure_space(height)
            y = flow.cursor.current_y
            canvas.set_fill_color(tint(color, 0.92))
            canvas.draw_rounded_rect(g.content_left, y, g.content_width, height, 2)
            canvas.set_font("bold", 11)
            canvas.set_text_color(color)
            canvas.draw_text(record.country, g.content_left + 4, y + 7)
            canvas.set_font("normal", 8)
            canvas.set_text_color(COLORS["slate"])
            canvas.draw_text(f"Internet users {record.internet_users}", g.content_left + g.content_width - 4,
                             y + 7, align="right")
            row_y = y + 13
            for label, pct in bars:
                canvas.set_font("normal", 8.5)
                canvas.set_text_color(COLORS["dark_gray"])
                canvas.draw_text(label, g.content_left + 4, row_y + 3.8)
                bar_x, bar_w = g.content_left + 40, g.content_width - 60
                canvas.set_fill_color(COLORS["border"])
                canvas.draw_rect(bar_x, row_y + 1, bar_w, 3.5)
                canvas.set_fill_color(color)
                canvas.draw_rect(bar_x, row_y + 1, bar_w * pct / 100, 3.5)
                canvas.draw_text(f"{pct}%", g.content_left + g.content_width - 4, row_y + 3.8, align="right")
                row_y += 6
            flow.cursor.current_y = row_y
            flow.write_lines([f"Social media {metrics.social_media_pct}% | Cloud adoption "
                              f"{metrics.cloud_adoption_pct}% | Fintech usage {metrics.fintech_usage_pct}%"],
                             SMALL, x=g.content_left + 4)
            flow.cursor.current_y = y + height + 4
            shown += 1
        if shown == 0:
            flow.paragraph("No digital adoption data is available for the selected markets.", BODY)
        self._callout(flow, "Digital Economy Insights", DIGITAL_INSIGHTS, COLORS["primary"], bulleted=True)

    # ----------------------------------------------------- consumer behavior

    def _add_consumer_behavior(self, flow: PageFlow):
        flow.section_header("Consumer Behavior", COLORS["warning"], keep_with=flow.table_lead())
        flow.table(
            ["Metric", "Value", "Trend", "Insight"],
            [[s.metric, s.value, s.trend, s.insight] for s in self.reference.consumer_stats()],
            [50, 18, 18, 84],
            color=COLORS["warning"],
        )

    # --------------------------------------------------------------- roadmap

    def _add_roadmap(self, flow: PageFlow):
        flow.new_page("Investment Recommendations")
        flow.section_header("Phased Market Entry Roadmap", COLORS["primary"])
        g = flow.geometry
        canvas = flow.canvas
        width = g.content_width - 16
        for index, (phase, duration, items) in enumerate(ROADMAP_PHASES):
            color = palette_color(index)
            lines: List[str] = []
            for item in items:
                wrapped = _wrap(canvas, item, BODY, width - 4)
                lines.extend(["- " + wrapped[0]] + ["  " + rest for rest in wrapped[1:]])
            height = 14 + len(lines) * BODY.line_height + 4
            flow.ensure_space(height)
            y = flow.cursor.current_y
            canvas.set_fill_color(tint(color, 0.9))
            canvas.draw_rounded_rect(g.content_left, y, g.content_width, height, 2)
            canvas.set_fill_color(color)
            canvas.draw_rect(g.content_left, y, 1.5, height)
            canvas.draw_circle(g.content_left + 8, y + 7, 3)
            canvas.set_font("bold", 12)
            canvas.set_text_color(color)
            canvas.draw_text(phase, g.content_left + 15, y + 9)
            canvas.set_font("normal", 8.5)
            canvas.set_text_color(COLORS["slate"])
            canvas.draw_text(duration, g.content_left + g.content_width - 4, y + 9, align="right")
            flow.cursor.current_y = y + 14
            flow.write_lines(lines, BODY, x=g.content_left + 8)
            flow.cursor.current_y = y + height + 5
        flow.spacer(2)
        self._callout(flow, "Investment Summary", INVESTMENT_SUMMARY, COLORS["warning"])

    # ---------------------------------------------------------------- footer

    def _stamp_footers(self, canvas: DocumentCanvas, g: PageGeometry, generated_at: datetime):
        total = canvas.page_count
        with canvas.chrome():
            for page in range(1, total + 1):
                canvas.set_page(page)
                canvas.set_fill_color(COLORS["dark_gray"])
                canvas.draw_rect(0, g.footer_top, g.width, g.footer_height)
                canvas.set_font("normal", 7)
                canvas.set_text_color(COLORS["light_gray"])
                canvas.draw_text(f"© {generated_at.year} {self.brand} Market Intelligence | Confidential",
                                 g.margin, g.height - 5)
                canvas.draw_text(f"Page {page} of {total}", g.width - g.margin, g.height - 5, align="right")
        canvas.set_page(total)

    # ================================================================== DECK

    def build_deck(self, request: "ExportRequest", generated_at: datetime) -> DocumentCanvas:
        canvas = DocumentCanvas(
            orientation="landscape",
            title="Flow Market Entry Strategy",
            created_at=generated_at,
        )
        g = PageGeometry.for_canvas(canvas, margin=15.0)
        scope = self.reference.scope(request.selected_countries)
        slides = (
            lambda: self._slide_title(canvas, g, request, generated_at),
            lambda: self._slide_mission(canvas, g),
            lambda: self._slide_challenge(canvas, g),
            lambda: self._slide_solution(canvas, g),
            lambda: self._slide_features(canvas, g),
            lambda: self._slide_differentiators(canvas, g),
            lambda: self._slide_impact(canvas, g, scope),
            lambda: self._slide_call_to_action(canvas, g, generated_at),
        )
        for name, draw in zip(DECK_SLIDES, slides):
            self._start_slide(canvas, g, name)
            draw()
            self._badge(canvas, g)
        logger.info("Composed deck: %d slides", canvas.page_count)
        return canvas

    def _start_slide(self, canvas: DocumentCanvas, g: PageGeometry, name: str, background: RGB = COLORS["dark"]):
        canvas.add_page()
        canvas.set_fill_color(background)
        canvas.draw_rect(0, 0, g.width, g.height)
        canvas.mark_section(name)

    def _badge(self, canvas: DocumentCanvas, g: PageGeometry):
        with canvas.chrome():
            canvas.set_fill_color(COLORS["white"])
            canvas.draw_rounded_rect(g.width - 50, g.height - 15, 45, 10, 2)
            canvas.set_font("bold", 9)
            canvas.set_text_color(COLORS["dark_gray"])
            canvas.draw_text(f"Made with {self.brand}", g.width - 27.5, g.height - 8.5, align="center")

    def _slide_heading(self, canvas: DocumentCanvas, text: str, top: float = 22.0) -> float:
        bottom = _draw_lines(canvas, [text], 20, top, TextStyle(28, "bold", COLORS["white"], 12))
        canvas.set_fill_color(COLORS["primary"])
        canvas.draw_rect(20, bottom + 3, 30, 1.5)
        return bottom + 12

    def _slide_title(self, canvas, g, request, generated_at):
        left_w = g.width * 0.55
        canvas.set_fill_color(mix(COLORS["accent"], COLORS["dark"], 0.75))
        canvas.draw_rect(left_w, 0, g.width - left_w, g.height)
        for i in range(12):
            canvas.set_fill_color(mix(COLORS["accent"], COLORS["dark"], 0.7 - i * 0.04))
            canvas.draw_circle(g.width - 55, 70 + i * 3, 42 - i * 3)

        title_style = TextStyle(36, "bold", COLORS["white"], 14)
        lines = _clamp(_wrap(canvas, "Flow Market Entry Strategy", title_style, left_w - 35), 3)
        y = _draw_lines(canvas, lines, 20, 35, title_style)
        y = _draw_lines(canvas, ["Penetrating Southeast Asian Markets"], 20, y + 8,
                        TextStyle(16, "normal", COLORS["light_gray"], 8))
        focus_style = TextStyle(13, "normal", COLORS["white"], 6.5)
        focus = self._focus_text(request.selected_countries, self.reference.lookup, "Southeast Asia")
        y = _draw_lines(canvas, _clamp(_wrap(canvas, f"Focus: {focus}", focus_style, left_w - 35), 4),
                        20, y + 6, focus_style)
        canvas.set_fill_color(COLORS["accent"])
        canvas.draw_rect(20, y + 4, 40, 1.5)
        _draw_lines(canvas, [f"Prepared {generated_at.strftime('%B %d, %Y')} | Data snapshot {self.reference.version}"],
                    20, y + 9, TextStyle(9, "normal", COLORS["light_gray"], 5))

    def _slide_mission(self, canvas, g):
        top = self._slide_heading(canvas, "Strategic Market Intelligence")
        box_w = (g.width - 40 - 10) / 2
        text_style = TextStyle(12, "normal", COLORS["white"], 6.5)
        for index, (title, text) in enumerate((("Our Mission", MISSION), ("Our Vision", VISION))):
            x = 20 + index * (box_w + 10)
            y = top + 8
            canvas.set_fill_color(mix(palette_color(index), COLORS["dark"], 0.7))
            canvas.draw_rounded_rect(x, y, box_w, 80, 3)
            bottom = _draw_lines(canvas, [title], x + 6, y + 6, TextStyle(16, "bold", palette_color(index), 9))
            _draw_lines(canvas, _clamp(_wrap(canvas, text, text_style, box_w - 12), 8), x + 6, bottom + 3, text_style)
        _draw_lines(canvas, ["Covering Indonesia, Thailand, Singapore, Malaysia, Vietnam and the Philippines"],
                    20, top + 100, TextStyle(11, "normal", COLORS["light_gray"], 6))

    def _slide_challenge(self, canvas, g):
        top = self._slide_heading(canvas, "The Critical Challenge")
        y = top + 8
        for title, points in CHALLENGES:
            y = _draw_lines(canvas, [title], 20, y, TextStyle(14, "bold", COLORS["white"], 7))
            y = _draw_lines(canvas, [f"- {p}" for p in points], 24, y + 1,
                            TextStyle(11, "normal", COLORS["light_gray"], 6))
            y += 6

        box_x, box_w = 165.0, g.width - 165 - 20
        bullet_style = TextStyle(10, "normal", COLORS["light_gray"], 5.5)
        lines: List[str] = []
        for impact in REAL_WORLD_IMPACT:
            wrapped = _wrap(canvas, impact, bullet_style, box_w - 16)
            lines.extend(["- " + wrapped[0]] + ["  " + rest for rest in wrapped[1:]])
        lines = _clamp(lines, 12)
        height = 4 + 7 + 4 + len(lines) * bullet_style.line_height + 6
        canvas.set_fill_color(mix(COLORS["accent"], COLORS["dark"], 0.7))
        canvas.draw_rounded_rect(box_x, top + 8, box_w, height, 3)
        bottom = _draw_lines(canvas, ["Real-World Impact"], box_x + 5, top + 12,
                             TextStyle(14, "bold", COLORS["white"], 7))
        _draw_lines(canvas, lines, box_x + 5, bottom + 4, bullet_style)

    def _slide_solution(self, canvas, g):
        top = self._slide_heading(canvas, "Our Game-Changing Solution")
        box_w, box_h, gap = 82.0, 40.0, 6.0
        desc_style = TextStyle(9.5, "normal", COLORS["light_gray"], 5)
        for index, (title, desc) in enumerate(SOLUTION_FEATURES):
            x = 20 + (index % 2) * (box_w + gap)
            y = top + 8 + (index // 2) * (box_h + gap)
            canvas.set_fill_color(mix(palette_color(index), COLORS["dark"], 0.75))
            canvas.draw_rounded_rect(x, y, box_w, box_h, 3)
            bottom = _draw_lines(canvas, [title], x + 4, y + 4, TextStyle(12, "bold", COLORS["white"], 6))
            _draw_lines(canvas, _clamp(_wrap(canvas, desc, desc_style, box_w - 8), 4), x + 4, bottom + 2, desc_style)

        x = 20 + 2 * box_w + gap + 15
        y = _draw_lines(canvas, ["Platform Benefits"], x, top + 8, TextStyle(14, "bold", COLORS["white"], 8))
        item_style = TextStyle(10, "normal", COLORS["light_gray"], 7)
        for benefit in PLATFORM_BENEFITS:
            canvas.set_fill_color(COLORS["secondary"])
            canvas.draw_circle(x + 1.5, y + 3.5, 1.2)
            y = _draw_lines(canvas, _clamp(_wrap(canvas, benefit, item_style, g.width - x - 25), 1), x + 5, y,
                            item_style)

    def _slide_features(self, canvas, g):
        top = self._slide_heading(canvas, "Innovative Features")
        gap = 8.0
        box_w, box_h = (g.width - 40 - gap) / 2, 50.0
        desc_style = TextStyle(10, "normal", COLORS["light_gray"], 5.5)
        for index, (title, desc) in enumerate(INNOVATIVE_FEATURES):
            color = palette_color(index)
            x = 20 + (index % 2) * (box_w + gap)
            y = top + 6 + (index // 2) * (box_h + gap)
            canvas.set_fill_color(mix(color, COLORS["dark"], 0.8))
            canvas.draw_rounded_rect(x, y, box_w, box_h, 3)
            canvas.set_fill_color(color)
            canvas.draw_rect(x, y, 2, box_h)
            bottom = _draw_lines(canvas, [title], x + 8, y + 5, TextStyle(13, "bold", COLORS["white"], 7))
            _draw_lines(canvas, _clamp(_wrap(canvas, desc, desc_style, box_w - 16), 5), x + 8, bottom + 3,
                        desc_style)

    def _slide_differentiators(self, canvas, g):
        top = self._slide_heading(canvas, "Why We're Revolutionary")
        y = top + 8
        desc_style = TextStyle(10.5, "normal", COLORS["light_gray"], 6)
        for index, (title, desc) in enumerate(DIFFERENTIATORS):
            canvas.set_fill_color(palette_color(index))
            canvas.draw_rect(20, y, 2, 26)
            bottom = _draw_lines(canvas, [title], 28, y, TextStyle(14, "bold", COLORS["white"], 7))
            _draw_lines(canvas, _clamp(_wrap(canvas, desc, desc_style, 140), 3), 28, bottom + 1, desc_style)
            y += 33

        box_x, box_y = 185.0, top + 8
        box_w = g.width - box_x - 15
        canvas.set_fill_color(mix(COLORS["accent"], COLORS["dark"], 0.7))
        canvas.draw_rounded_rect(box_x, box_y, box_w, 100, 3)
        y = _draw_lines(canvas, ["Platform Impact"], box_x + 6, box_y + 5, TextStyle(14, "bold", COLORS["white"], 9))
        for value, label in PLATFORM_IMPACT:
            y = _draw_lines(canvas, [value], box_x + 6, y + 3, TextStyle(18, "bold", COLORS["white"], 9))
            y = _draw_lines(canvas, [label], box_x + 6, y, TextStyle(9, "normal", COLORS["light_gray"], 5))

    def _slide_impact(self, canvas, g, scope: Sequence[MarketRecord]):
        top = self._slide_heading(canvas, "Measurable Impact")
        desc_style = TextStyle(10, "normal", COLORS["light_gray"], 5.5)
        for index, (title, desc) in enumerate(IMPACT_PHASES):
            color = palette_color(index)
            y = top + 4 + index * 38
            canvas.set_fill_color(mix(color, COLORS["dark"], 0.8))
            canvas.draw_rounded_rect(20, y, g.width - 40, 32, 3)
            canvas.set_fill_color(color)
            canvas.draw_circle(32, y + 16, 7)
            canvas.set_font("bold", 12)
            canvas.set_text_color(COLORS["white"])
            canvas.draw_text(f"{index + 1:02d}", 32, y + 18, align="center")
            bottom = _draw_lines(canvas, [title], 46, y + 5, TextStyle(13, "bold", COLORS["white"], 7))
            _draw_lines(canvas, _clamp(_wrap(canvas, desc, desc_style, g.width - 46 - 30), 2), 46, bottom + 2,
                        desc_style)

        summary_style = TextStyle(11, "normal", COLORS["light_gray"], 6)
        metrics = dict((label, value) for label, value, _ in self._scope_metrics(scope))
        summary = (f"Selected markets: {metrics['Markets in Scope']} in scope | combined market "
                   f"{metrics['Combined Market']} | average growth {metrics['Avg GDP Growth']}")
        _draw_lines(canvas, _clamp(_wrap(canvas, summary, summary_style, g.width - 40), 2), 20, top + 4 + 3 * 38 + 4,
                    summary_style)

    def _slide_call_to_action(self, canvas, g, generated_at):
        canvas.set_fill_color(mix(COLORS["primary"], COLORS["dark"], 0.6))
        canvas.draw_rect(0, 0, g.width, g.height)
        center = g.width / 2
        y = _draw_lines(canvas, ["Ready to Transform", "Your Market Entry?"], center, 32,
                        TextStyle(32, "bold", COLORS["white"], 14), align="center")
        y = _draw_lines(canvas, ["Start your Southeast Asian expansion with confidence"], center, y + 6,
                        TextStyle(14, "normal", COLORS["light_gray"], 7), align="center")

        box_w, gap = 70.0, 12.0
        start = (g.width - (3 * box_w + 2 * gap)) / 2
        box_y = y + 12
        for index, (title, desc) in enumerate(CALL_TO_ACTION):
            x = start + index * (box_w + gap)
            canvas.set_fill_color(mix(palette_color(index), COLORS["dark"], 0.55))
            canvas.draw_rounded_rect(x, box_y, box_w, 30, 3)
            bottom = _draw_lines(canvas, [title], x + box_w / 2, box_y + 5,
                                 TextStyle(13, "bold", COLORS["white"], 7), align="center")
            _draw_lines(canvas, [desc], x + box_w / 2, bottom + 3,
                        TextStyle(9.5, "normal", COLORS["light_gray"], 5), align="center")

        y = _draw_lines(canvas, list(CLOSING_QUOTE), center, box_y + 44,
                        TextStyle(11, "italic", COLORS["white"], 6), align="center")
        _draw_lines(canvas, [f"{self.brand} Market Intelligence | {generated_at.strftime('%B %Y')}"], center, y + 8,
                    TextStyle(9, "normal", COLORS["light_gray"], 5), align="center")
