"""Tests for year reconciliation."""

from datetime import date

from fundamentals_etl.core.fundamentals.models import BalanceRecord, IncomeRecord
from fundamentals_etl.core.fundamentals.reconciler import reconcile_years, resolve_year_limit


def income(year, revenue=100.0, net_income=10.0):
    return IncomeRecord(fiscal_year=year, revenue=revenue, net_income=net_income)


def balance(year, assets=200.0, liabilities=100.0):
    return BalanceRecord(fiscal_year=year, total_assets=assets, total_liabilities=liabilities)


class TestResolveYearLimit:
    """Tests for resolve_year_limit."""

    def test_default_lookback(self):
        assert resolve_year_limit(date(2024, 6, 1)) == 2021

    def test_custom_lookback(self):
        assert resolve_year_limit(date(2024, 1, 1), lookback_years=5) == 2019

    def test_defaults_to_today(self):
        assert resolve_year_limit() == date.today().year - 3


class TestReconcileYears:
    """Tests for reconcile_years."""

    def test_merges_matching_years(self):
        result = reconcile_years(
            "TEL",
            [income(2023, revenue=10000.0, net_income=1000.0)],
            [balance(2023, assets=50000.0, liabilities=25000.0)],
            year_limit=2021,
        )

        assert len(result.rows) == 1
        row = result.rows[0]
        assert row.fiscal_year == 2023
        assert row.revenue == 10000.0
        assert row.net_income == 1000.0
        assert row.total_assets == 50000.0
        assert row.total_liabilities == 25000.0

    def test_income_without_balance_is_skipped(self):
        result = reconcile_years("TEL", [income(2023)], [balance(2022)], year_limit=2021)

        assert result.rows == []
        assert result.skipped_years == [2023]

    def test_balance_without_income_is_ignored(self):
        result = reconcile_years("TEL", [income(2023)], [balance(2023), balance(2022)], year_limit=2021)

        assert [r.fiscal_year for r in result.rows] == [2023]
        assert result.skipped_years == []

    def test_trailing_window_excludes_old_years(self):
        year_limit = resolve_year_limit(date(2024, 3, 1))

        result = reconcile_years(
            "ST",
            [income(2020), income(2021), income(2023)],
            [balance(2020), balance(2021), balance(2023)],
            year_limit=year_limit,
        )

        assert [r.fiscal_year for r in result.rows] == [2021, 2023]
        assert result.excluded_years == [2020]

    def test_rows_sorted_ascending(self):
        result = reconcile_years(
            "DD",
            [income(2023), income(2021), income(2022)],
            [balance(2021), balance(2022), balance(2023)],
            year_limit=2020,
        )

        assert [r.fiscal_year for r in result.rows] == [2021, 2022, 2023]

    def test_duplicate_year_last_wins(self):
        result = reconcile_years(
            "DD",
            [income(2023, revenue=1.0), income(2023, revenue=2.0)],
            [balance(2023, assets=5.0), balance(2023, assets=6.0)],
            year_limit=2020,
        )

        assert len(result.rows) == 1
        assert result.rows[0].revenue == 2.0
        assert result.rows[0].total_assets == 6.0

    def test_all_null_row_is_kept(self):
        result = reconcile_years(
            "DD",
            [IncomeRecord(fiscal_year=2023, revenue=None, net_income=None)],
            [BalanceRecord(fiscal_year=2023, total_assets=None, total_liabilities=None)],
            year_limit=2020,
        )

        assert len(result.rows) == 1
        assert result.rows[0].is_empty

    def test_empty_inputs(self):
        result = reconcile_years("DD", [], [], year_limit=2020)

        assert result.symbol == "DD"
        assert result.rows == []
