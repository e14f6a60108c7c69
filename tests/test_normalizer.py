"""Tests for statement normalization."""

import pytest

from fundamentals_etl.core.fundamentals.normalizer import (
    MissingValuePolicy,
    RevenueFieldPolicy,
    normalize_balance_report,
    normalize_balance_reports,
    normalize_income_report,
    normalize_income_reports,
)
from fundamentals_etl.domain.exceptions import DataValidationError

# ============================================================================
# Sample data for tests
# ============================================================================

INCOME_2023 = {
    "fiscalDateEnding": "2023-09-30",
    "reportedCurrency": "USD",
    "grossProfit": "5,000",
    "totalRevenue": "10,000",
    "netIncome": "1,000",
}

BALANCE_2023 = {
    "fiscalDateEnding": "2023-09-30",
    "reportedCurrency": "USD",
    "totalAssets": "50,000",
    "totalLiabilities": "25,000",
}


# ============================================================================
# Income statements
# ============================================================================


class TestNormalizeIncomeReport:
    """Tests for normalize_income_report."""

    def test_parses_figures(self):
        record = normalize_income_report(INCOME_2023)

        assert record.fiscal_year == 2023
        assert record.revenue == 10000.0
        assert record.net_income == 1000.0
        assert record.revenue_source == "totalRevenue"

    def test_falls_back_to_gross_profit(self):
        report = {**INCOME_2023, "totalRevenue": "None"}

        record = normalize_income_report(report)

        assert record.revenue == 5000.0
        assert record.revenue_source == "grossProfit"

    def test_gross_profit_policy_prefers_gross_profit(self):
        record = normalize_income_report(INCOME_2023, policy=RevenueFieldPolicy.GROSS_PROFIT)

        assert record.revenue == 5000.0
        assert record.revenue_source == "grossProfit"

    def test_gross_profit_policy_falls_back_to_total_revenue(self):
        report = {**INCOME_2023, "grossProfit": "None"}

        record = normalize_income_report(report, policy=RevenueFieldPolicy.GROSS_PROFIT)

        assert record.revenue == 10000.0
        assert record.revenue_source == "totalRevenue"

    def test_missing_fields_are_null_by_default(self):
        record = normalize_income_report({"fiscalDateEnding": "2022-12-31"})

        assert record.fiscal_year == 2022
        assert record.revenue is None
        assert record.net_income is None
        assert record.revenue_source is None

    def test_missing_fields_zero_policy(self):
        record = normalize_income_report(
            {"fiscalDateEnding": "2022-12-31", "netIncome": "abc"},
            missing=MissingValuePolicy.ZERO,
        )

        assert record.revenue == 0.0
        assert record.net_income == 0.0

    def test_no_fiscal_date_returns_none(self):
        assert normalize_income_report({"totalRevenue": "10"}) is None
        assert normalize_income_report({"fiscalDateEnding": "bad"}) is None

    def test_parenthesized_net_loss(self):
        record = normalize_income_report({**INCOME_2023, "netIncome": "(250)"})

        assert record.net_income == -250.0


class TestNormalizeIncomeReports:
    """Tests for normalize_income_reports."""

    def test_drops_unusable_reports(self):
        reports = [INCOME_2023, {"totalRevenue": "1"}, "not a dict", {**INCOME_2023, "fiscalDateEnding": "2022-09-30"}]

        records = normalize_income_reports(reports)

        assert [r.fiscal_year for r in records] == [2023, 2022]

    def test_drops_report_with_non_ascii_year(self):
        reports = [{**INCOME_2023, "fiscalDateEnding": "\u00b2023-09-30"}, INCOME_2023]

        records = normalize_income_reports(reports)

        assert [r.fiscal_year for r in records] == [2023]

    def test_empty_input(self):
        assert normalize_income_reports([]) == []


# ============================================================================
# Balance sheets
# ============================================================================


class TestNormalizeBalanceReport:
    """Tests for normalize_balance_report."""

    def test_parses_figures(self):
        record = normalize_balance_report(BALANCE_2023)

        assert record.fiscal_year == 2023
        assert record.total_assets == 50000.0
        assert record.total_liabilities == 25000.0

    def test_missing_liabilities(self):
        record = normalize_balance_report({**BALANCE_2023, "totalLiabilities": "None"})

        assert record.total_liabilities is None

    def test_missing_liabilities_zero_policy(self):
        record = normalize_balance_report(
            {**BALANCE_2023, "totalLiabilities": "None"}, missing=MissingValuePolicy.ZERO
        )

        assert record.total_liabilities == 0.0

    def test_series_drops_reports_without_date(self):
        records = normalize_balance_reports([BALANCE_2023, {"totalAssets": "1"}])

        assert len(records) == 1


# ============================================================================
# Policies
# ============================================================================


class TestPolicies:
    """Tests for policy parsing."""

    def test_revenue_policy_parse(self):
        assert RevenueFieldPolicy.parse(" Gross_Profit ") is RevenueFieldPolicy.GROSS_PROFIT

    def test_revenue_policy_parse_unknown(self):
        with pytest.raises(DataValidationError) as exc_info:
            RevenueFieldPolicy.parse("ebitda")
        assert exc_info.value.field == "revenue_policy"

    def test_missing_value_policy_parse(self):
        assert MissingValuePolicy.parse("ZERO") is MissingValuePolicy.ZERO
        assert MissingValuePolicy.NULL.default is None
        assert MissingValuePolicy.ZERO.default == 0.0

    def test_missing_value_policy_parse_unknown(self):
        with pytest.raises(DataValidationError):
            MissingValuePolicy.parse("drop")
