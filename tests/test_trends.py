import itertools
import unittest
from datetime import date

from seller_ops.core.profit import calculate_profit_breakdown
from seller_ops.core.trends import (
    calculate_product_metrics,
    calculate_product_trends,
    comparison_date_range,
    percentage_change,
    rank_worst_products,
    summarize_period,
)

_ids = itertools.count(1)


def _row(sku, day, quantity, revenue, profit, name=None, **extra):
    """Sale line whose revenue and profit come out as given with no platform fee."""
    row = {
        "id": next(_ids),
        "sku": sku,
        "product_name": name or sku,
        "sale_date": day,
        "quantity_sold": quantity,
        "sale_price": revenue / quantity,
        "cost_per_unit": (revenue - profit) / quantity,
    }
    row.update(extra)
    return row


class ComparisonRangeTest(unittest.TestCase):
    def test_week_windows_are_adjacent(self):
        ranges = comparison_date_range("week", date(2024, 5, 14))
        self.assertEqual(ranges.current.start, date(2024, 5, 8))
        self.assertEqual(ranges.current.end, date(2024, 5, 14))
        self.assertEqual(ranges.previous.end, date(2024, 5, 7))
        self.assertEqual(ranges.previous.start, date(2024, 5, 1))

    def test_unknown_range(self):
        with self.assertRaises(ValueError):
            comparison_date_range("decade", date(2024, 1, 1))


class PercentageChangeTest(unittest.TestCase):
    def test_undefined_when_previous_is_zero(self):
        self.assertIsNone(percentage_change(10, 0))
        self.assertIsNone(percentage_change(0, 0))

    def test_uses_absolute_previous(self):
        self.assertAlmostEqual(percentage_change(15, 10), 50)
        self.assertAlmostEqual(percentage_change(-5, -10), 50)


class ProductTrendsTest(unittest.TestCase):
    def setUp(self):
        self.rows = [
            _row("A", date(2024, 5, 10), 4, 100, 25),
            _row("A", date(2024, 5, 12), 2, 100, 25),
            _row("A", date(2024, 5, 3), 3, 100, 20),
            _row("B", date(2024, 5, 11), 1, 40, 4),
            _row("C", date(2024, 4, 1), 1, 10, 1),
        ]
        self.ranges = comparison_date_range("week", date(2024, 5, 14))

    def _trends(self):
        return calculate_product_trends(
            self.rows,
            self.ranges.current.start,
            self.ranges.current.end,
            self.ranges.previous.start,
            self.ranges.previous.end,
            fee_rate=0.0,
        )

    def test_metrics_per_sku(self):
        metrics = {item["sku"]: item for item in calculate_product_metrics(self.rows[:2], fee_rate=0.0)}
        item = metrics["A"]
        self.assertEqual(item["order_count"], 2)
        self.assertAlmostEqual(item["avg_quantity_per_order"], 3)
        self.assertAlmostEqual(item["profit_margin"], 25)
        self.assertEqual(item["last_sale_date"], date(2024, 5, 12))

    def test_trends_compare_with_previous_window(self):
        trends = self._trends()
        self.assertEqual([item["sku"] for item in trends], ["A", "B"])
        product_a = trends[0]
        self.assertAlmostEqual(product_a["quantity_trend"], 100)
        self.assertAlmostEqual(product_a["profit_margin_trend"], 25)

    def test_trend_is_none_without_previous_sales(self):
        product_b = self._trends()[1]
        self.assertIsNone(product_b["quantity_trend"])
        self.assertIsNone(product_b["profit_margin_trend"])

    def test_period_summary(self):
        summary = summarize_period(
            self.rows,
            self.ranges.current.start,
            self.ranges.current.end,
            self.ranges.previous.start,
            self.ranges.previous.end,
            fee_rate=0.0,
        )
        self.assertAlmostEqual(summary["total_revenue"], 240)
        self.assertEqual(summary["total_orders"], 3)
        self.assertAlmostEqual(summary["revenue_growth"], 140)
        self.assertAlmostEqual(summary["profit_growth"], 170)


class OrderCostTest(unittest.TestCase):
    def setUp(self):
        day = date(2024, 5, 10)
        self.rows = [
            {"id": 1, "order_number": "A", "sku": "X", "sale_date": day, "quantity_sold": 1,
             "sale_price": 100, "cost_per_unit": 40, "additional_costs": 5},
            {"id": 2, "order_number": "A", "sku": "Y", "sale_date": day, "quantity_sold": 1,
             "sale_price": 50, "cost_per_unit": 20, "additional_costs": 5},
        ]
        self.ranges = comparison_date_range("week", date(2024, 5, 14))

    def test_summary_charges_order_cost_once(self):
        summary = summarize_period(
            self.rows,
            self.ranges.current.start,
            self.ranges.current.end,
            self.ranges.previous.start,
            self.ranges.previous.end,
        )
        self.assertAlmostEqual(summary["total_profit"], 73)
        self.assertAlmostEqual(summary["total_profit"], calculate_profit_breakdown(self.rows).net_profit)
        self.assertEqual(summary["total_orders"], 1)

    def test_order_cost_lands_on_first_line_sku(self):
        metrics = {item["sku"]: item for item in calculate_product_metrics(self.rows)}
        self.assertAlmostEqual(metrics["X"]["total_profit"], 47)
        self.assertAlmostEqual(metrics["Y"]["total_profit"], 26)
        self.assertEqual(metrics["X"]["order_count"], 1)


class WorstProductsTest(unittest.TestCase):
    def test_negative_margins_rank_first(self):
        products = [
            {"sku": "good", "profit_margin": 40, "total_profit": 100},
            {"sku": "thin", "profit_margin": 2, "total_profit": 5},
            {"sku": "loss-small", "profit_margin": -5, "total_profit": -2},
            {"sku": "loss-big", "profit_margin": -30, "total_profit": -50},
        ]
        ranked = rank_worst_products(products, limit=3)
        self.assertEqual([item["sku"] for item in ranked], ["loss-big", "loss-small", "thin"])


if __name__ == "__main__":
    unittest.main()
