"""Tests for report and deck composition."""

import pytest

from flow.services.layout import PALETTE, DocumentCursor, PageFlow, PageGeometry, palette_color
from flow.services.canvas import DocumentCanvas
from flow.services.layout_composer import DECK_SLIDES, display_name


def content_baselines_within_margin(canvas, margin):
    limit = canvas.page_height - margin
    return [op for op in canvas.texts(include_chrome=False) if op.y > limit + 1e-6]


def country_blocks(canvas):
    return [entry.title for entry in canvas.outline if entry.level == 1]


class TestReportStructure:
    def test_one_block_per_country_in_selection_order(self, layout_composer, make_request, fixed_now):
        request = make_request("pdf", ["singapore", "indonesia", "vietnam"])
        canvas = layout_composer.build_report(request, fixed_now)
        assert country_blocks(canvas) == ["1. Singapore", "2. Indonesia", "3. Vietnam"]

    def test_unknown_country_renders_placeholder(self, layout_composer, make_request, fixed_now):
        canvas = layout_composer.build_report(make_request("pdf", ["indonesia", "atlantis"]), fixed_now)
        assert country_blocks(canvas) == ["1. Indonesia", "2. Atlantis"]
        assert any(op.text == "N/A" for op in canvas.texts())

    def test_zero_countries_still_builds(self, layout_composer, make_request, fixed_now):
        canvas = layout_composer.build_report(make_request("pdf", []), fixed_now)
        assert country_blocks(canvas) == []
        assert canvas.page_count >= 1
        assert canvas.save("empty.pdf").content.startswith(b"%PDF")

    def test_section_order(self, layout_composer, make_request, fixed_now):
        canvas = layout_composer.build_report(make_request("pdf", ["thailand"], ["bangkok"]), fixed_now)
        sections = [entry.title for entry in canvas.outline if entry.level == 0]
        assert sections == [
            "Cover",
            "Executive Summary",
            "Market Overview",
            "Country Deep Dive",
            "City Profiles",
            "Industry Opportunity Ranking",
            "Digital Adoption",
            "Consumer Behavior",
            "Phased Market Entry Roadmap",
        ]

    def test_city_profiles_only_when_selected(self, layout_composer, make_request, fixed_now):
        canvas = layout_composer.build_report(make_request("pdf", ["thailand"]), fixed_now)
        assert "City Profiles" not in [entry.title for entry in canvas.outline]

    def test_cover_names_focus_markets_in_order(self, layout_composer, make_request, fixed_now):
        canvas = layout_composer.build_report(make_request("pdf", ["vietnam", "malaysia"]), fixed_now)
        cover = [op.text for op in canvas.texts() if op.page == 1]
        assert "Focus Markets: Vietnam | Malaysia" in cover
        assert "Generated: January 15, 2025" in cover

    def test_industries_ranked_by_opportunity(self, layout_composer, make_request, fixed_now, reference):
        canvas = layout_composer.build_report(make_request("pdf", ["indonesia"]), fixed_now)
        texts = [op.text for op in canvas.texts()]
        best = max(reference.industries(), key=lambda i: i.opportunity_score)
        worst = min(reference.industries(), key=lambda i: i.opportunity_score)
        assert texts.index(best.name) < texts.index(worst.name)

    def test_currency_literals_come_from_snapshot(self, layout_composer, make_request, fixed_now):
        canvas = layout_composer.build_report(make_request("pdf", ["indonesia"]), fixed_now)
        assert "$287.2B" in [op.text for op in canvas.texts()]


class TestReportLayout:
    @pytest.mark.parametrize("countries", [
        [],
        ["indonesia"],
        ["indonesia", "thailand", "singapore", "malaysia", "vietnam", "philippines"],
        [f"market{i}" for i in range(25)],
    ])
    def test_no_content_baseline_below_margin(self, layout_composer, make_request, fixed_now, countries):
        cities = ["bangkok", "jakarta", "manila", "nowhere"]
        canvas = layout_composer.build_report(make_request("pdf", countries, cities), fixed_now)
        assert content_baselines_within_margin(canvas, 20.0) == []

    def test_long_selection_flows_onto_more_pages(self, layout_composer, make_request, fixed_now):
        short = layout_composer.build_report(make_request("pdf", ["indonesia"]), fixed_now)
        long = layout_composer.build_report(make_request("pdf", [f"market{i}" for i in range(25)]), fixed_now)
        assert long.page_count > short.page_count
        assert len(country_blocks(long)) == 25

    def test_every_page_gets_a_footer(self, layout_composer, make_request, fixed_now):
        canvas = layout_composer.build_report(make_request("pdf", ["indonesia", "singapore"]), fixed_now)
        total = canvas.page_count
        footers = {op.page: op.text for op in canvas.texts() if op.chrome and op.text.startswith("Page ")}
        assert footers == {i: f"Page {i} of {total}" for i in range(1, total + 1)}

    def test_continuation_pages_redraw_header(self, layout_composer, make_request, fixed_now):
        canvas = layout_composer.build_report(make_request("pdf", [f"market{i}" for i in range(25)]), fixed_now)
        header_pages = {op.page for op in canvas.texts() if op.chrome and op.text == "FLOW" and op.y < 15}
        assert header_pages == set(range(2, canvas.page_count + 1))

    @pytest.mark.parametrize("unknown", range(0, 26, 2))
    def test_city_header_shares_page_with_first_card(self, layout_composer, make_request, fixed_now, unknown):
        countries = [f"market{i}" for i in range(unknown)]
        canvas = layout_composer.build_report(make_request("pdf", countries, ["bangkok", "jakarta"]), fixed_now)
        (header,) = [entry for entry in canvas.outline if entry.title == "City Profiles"]
        first_card = next(op for op in canvas.texts(include_chrome=False) if op.text == "Bangkok, Thailand")
        assert header.page == first_card.page

    @pytest.mark.parametrize("countries", [
        ["indonesia"],
        ["indonesia", "thailand"],
        ["indonesia", "thailand", "singapore"],
        ["indonesia", "thailand", "singapore", "malaysia"],
        ["indonesia", "thailand", "singapore", "malaysia", "vietnam", "philippines"],
    ])
    def test_consumer_header_shares_page_with_table(self, layout_composer, make_request, fixed_now, countries):
        canvas = layout_composer.build_report(make_request("pdf", countries), fixed_now)
        (header,) = [entry for entry in canvas.outline if entry.title == "Consumer Behavior"]
        table_head = next(op for op in canvas.texts(include_chrome=False) if op.text == "Metric")
        assert header.page == table_head.page

    def test_composition_is_repeatable(self, layout_composer, make_request, fixed_now):
        request = make_request("pdf", ["indonesia", "singapore"], ["jakarta"])
        first = layout_composer.build_report(request, fixed_now)
        second = layout_composer.build_report(request, fixed_now)
        assert first.operations == second.operations


class TestDeck:
    def test_exactly_eight_landscape_slides(self, layout_composer, make_request, fixed_now):
        canvas = layout_composer.build_deck(make_request("ppt", ["indonesia"]), fixed_now)
        assert canvas.page_count == 8
        assert canvas.page_width > canvas.page_height
        assert [entry.title for entry in canvas.outline] == list(DECK_SLIDES)

    def test_title_slide_names_focus_markets(self, layout_composer, make_request, fixed_now):
        canvas = layout_composer.build_deck(make_request("ppt", ["singapore", "indonesia"]), fixed_now)
        first_slide = [op.text for op in canvas.texts() if op.page == 1]
        assert "Focus: Singapore | Indonesia" in first_slide

    def test_every_slide_has_badge(self, layout_composer, make_request, fixed_now):
        canvas = layout_composer.build_deck(make_request("ppt"), fixed_now)
        badges = [op.page for op in canvas.texts() if op.chrome and op.text == "Made with FLOW"]
        assert badges == list(range(1, 9))

    @pytest.mark.parametrize("countries", [[], ["vietnam"], [f"market{i}" for i in range(40)]])
    def test_slide_count_and_baselines_hold_for_any_selection(self, layout_composer, make_request, fixed_now,
                                                              countries):
        canvas = layout_composer.build_deck(make_request("ppt", countries), fixed_now)
        assert canvas.page_count == 8
        assert content_baselines_within_margin(canvas, 15.0) == []


class TestLayoutPrimitives:
    def test_palette_cycles(self):
        assert palette_color(0) == PALETTE[0]
        assert palette_color(len(PALETTE)) == PALETTE[0]
        assert palette_color(len(PALETTE) + 1) == PALETTE[1]

    def test_geometry_regions(self):
        g = PageGeometry(width=210, height=297, margin=20)
        assert g.content_bottom == 277
        assert g.footer_top == 285
        assert g.content_top < g.content_bottom
        assert g.content_width == 170

    def test_cursor_fits(self):
        cursor = DocumentCursor(page_width=210, page_height=297, current_y=270, margin=20)
        assert cursor.fits(7)
        assert not cursor.fits(7.5)

    def test_ensure_space_breaks_and_resets_cursor(self):
        canvas = DocumentCanvas()
        flow = PageFlow(canvas, PageGeometry.for_canvas(canvas))
        flow.new_page("Test")
        flow.cursor.current_y = 270
        assert flow.ensure_space(20) is True
        assert canvas.page_count == 2
        assert flow.cursor.current_y == flow.geometry.content_top
        assert flow.ensure_space(20) is False

    def test_section_header_moves_with_kept_content(self):
        canvas = DocumentCanvas()
        flow = PageFlow(canvas, PageGeometry.for_canvas(canvas))
        flow.new_page("Test")
        flow.cursor.current_y = 230
        flow.section_header("Held", keep_with=40)
        assert canvas.outline[-1].page == 2
        assert flow.cursor.fits(40)

    def test_table_lead_covers_head_and_first_row(self):
        assert PageFlow.table_lead(7) == 15

    def test_display_name(self):
        assert display_name("indonesia") == "Indonesia"
        assert display_name("") == ""
