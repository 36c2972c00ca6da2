"""
Service for generating the multi-sheet market data workbook.
Each sheet is built as a DataFrame first, then written with a styled header
row and an Excel table over the data.
"""
from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Dict, List, Mapping, Sequence

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.utils.dataframe import dataframe_to_rows
from openpyxl.worksheet.table import Table, TableStyleInfo

from .reference_data import ReferenceData

if TYPE_CHECKING:
    from .export_service import ExportRequest

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"

MARKET_OVERVIEW_COLUMNS = [
    "Country", "Population", "GDP", "Market Size (USD B)", "Growth (%)",
    "Digital Penetration (%)", "Data Source",
]
INDUSTRY_COLUMNS = [
    "Industry", "Market Size (USD B)", "Growth (%)", "Competition", "Opportunity Score", "Source",
]
DIGITAL_COLUMNS = [
    "Country", "Internet (%)", "Mobile (%)", "E-commerce (%)", "Digital Payments (%)",
    "Social Media (%)", "Cloud Adoption (%)", "Fintech Usage (%)",
]
CONSUMER_COLUMNS = ["Metric", "Value", "Trend", "Insight"]
GROWTH_COLUMNS = [
    "Country", "2022 Growth", "2023 Growth", "2024 Growth (Est)", "2025 Forecast", "5-Year CAGR",
]

SHEET_ORDER = (
    "Market Overview", "Industry Analysis", "Digital Metrics", "Consumer Behavior", "Growth Projections",
)

HEADER_FONT = Font(name='Arial', size=11, bold=True, color='FFFFFF')
HEADER_FILL = PatternFill(start_color='3B82F6', end_color='3B82F6', fill_type='solid')
CELL_FONT = Font(name='Arial', size=10)


def country_label(country_id: str) -> str:
    return country_id[:1].upper() + country_id[1:]


def build_sheet(rows: Sequence[Sequence], columns: Sequence[str]) -> pd.DataFrame:
    """Tabular sheet with a fixed column order"""
    return pd.DataFrame(list(rows), columns=list(columns))


def assemble_workbook(sheets: Mapping[str, pd.DataFrame], title: str = "Flow Market Data") -> Workbook:
    """
    Write each DataFrame to its own worksheet, in mapping order.

    Row 1 holds the styled header, data starts at row 2. No formulas and no
    cross-sheet references are written.
    """
    wb = Workbook()
    wb.remove(wb.active)  # Remove default sheet
    wb.properties.title = title
    wb.properties.creator = "Flow Analytics"

    for name, df in sheets.items():
        ws = wb.create_sheet(name)
        cols = list(df.columns)

        for c_idx, col_name in enumerate(cols, 1):
            cell = ws.cell(row=1, column=c_idx, value=col_name)
            cell.font = HEADER_FONT
            cell.fill = HEADER_FILL
            cell.alignment = Alignment(horizontal='center', vertical='center', wrap_text=True)

        for r_idx, row in enumerate(dataframe_to_rows(df, index=False, header=False), 2):
            for c_idx, value in enumerate(row, 1):
                cell = ws.cell(row=r_idx, column=c_idx, value=value)
                cell.font = CELL_FONT
                cell.alignment = Alignment(horizontal='left', vertical='top')

        for c_idx, col_name in enumerate(cols, 1):
            longest = max([len(str(col_name))] + [len(str(v)) for v in df.iloc[:, c_idx - 1]])
            ws.column_dimensions[get_column_letter(c_idx)].width = min(max(longest + 2, 12), 60)
        ws.freeze_panes = "A2"

        if len(df) > 0:
            end_col = get_column_letter(len(cols))
            tab = Table(displayName=re.sub(r'[^A-Za-z0-9]', '', name) or "Sheet", ref=f"A1:{end_col}{len(df) + 1}")
            tab.tableStyleInfo = TableStyleInfo(name="TableStyleMedium9", showRowStripes=True)
            ws.add_table(tab)

    return wb


class WorkbookComposer:
    """Builds the five market data sheets from the reference tables"""

    def __init__(self, reference: ReferenceData):
        self.reference = reference

    def build_workbook(self, request: "ExportRequest") -> Workbook:
        sheets: Dict[str, pd.DataFrame] = {
            "Market Overview": self.market_overview(request.selected_countries),
            "Industry Analysis": self.industry_analysis(),
            "Digital Metrics": self.digital_metrics(request.selected_countries),
            "Consumer Behavior": self.consumer_behavior(),
            "Growth Projections": self.growth_projections(request.selected_countries),
        }
        logger.info("Composed workbook for %d countries", len(request.selected_countries))
        return assemble_workbook(sheets)

    def market_overview(self, country_ids: Sequence[str]) -> pd.DataFrame:
        rows: List[list] = []
        for country_id in country_ids:
            record = self.reference.lookup(country_id)
            if record is None:
                rows.append([country_label(country_id)] + [NOT_AVAILABLE] * (len(MARKET_OVERVIEW_COLUMNS) - 1))
                continue
            rows.append([
                country_label(country_id), record.population, record.gdp, record.market_size_usd,
                record.growth_pct, record.digital_penetration_pct, record.data_source,
            ])
        return build_sheet(rows, MARKET_OVERVIEW_COLUMNS)

    def industry_analysis(self) -> pd.DataFrame:
        rows = [
            [ind.name, ind.market_size_usd, ind.growth_pct, ind.competition_level.value,
             ind.opportunity_score, ind.source]
            for ind in self.reference.industries()
        ]
        return build_sheet(rows, INDUSTRY_COLUMNS)

    def digital_metrics(self, country_ids: Sequence[str]) -> pd.DataFrame:
        rows: List[list] = []
        for country_id in country_ids:
            m = self.reference.digital_metrics(country_id)
            if m is None:
                rows.append([country_label(country_id)] + [NOT_AVAILABLE] * (len(DIGITAL_COLUMNS) - 1))
                continue
            rows.append([
                country_label(country_id), m.internet_pct, m.mobile_pct, m.ecommerce_pct,
                m.digital_payments_pct, m.social_media_pct, m.cloud_adoption_pct, m.fintech_usage_pct,
            ])
        return build_sheet(rows, DIGITAL_COLUMNS)

    def consumer_behavior(self) -> pd.DataFrame:
        rows = [[s.metric, s.value, s.trend, s.insight] for s in self.reference.consumer_stats()]
        return build_sheet(rows, CONSUMER_COLUMNS)

    def growth_projections(self, country_ids: Sequence[str]) -> pd.DataFrame:
        """2022-2025 series derived from the current growth rate"""
        rows: List[list] = []
        for country_id in country_ids:
            record = self.reference.lookup(country_id)
            if record is None:
                rows.append([country_label(country_id)] + [NOT_AVAILABLE] * (len(GROWTH_COLUMNS) - 1))
                continue
            growth = record.growth_pct
            rows.append([
                country_label(country_id),
                round(growth - 1.0, 1),
                round(growth - 0.5, 1),
                growth,
                round(growth + 0.3, 1),
                growth,
            ])
        return build_sheet(rows, GROWTH_COLUMNS)
