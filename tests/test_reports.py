import unittest
from datetime import date

from seller_ops.core.reports import (
    aggregate_monthly_report,
    bucket_key,
    process_sales_data,
)


def _sale(sale_id, order, day, price, cost=0, additional=0, quantity=1):
    return {
        "id": sale_id,
        "order_number": order,
        "sale_date": day,
        "quantity_sold": quantity,
        "sale_price": price,
        "cost_per_unit": cost,
        "additional_costs": additional,
    }


SALES = [
    _sale(1, "A", date(2024, 1, 5), 100, cost=40, additional=5),
    _sale(2, "A", date(2024, 1, 6), 50, cost=20, additional=5),
    _sale(3, "B", date(2024, 1, 31), 30, cost=10),
    _sale(4, "B", date(2024, 2, 1), 30, cost=10),
    _sale(5, "C", date(2024, 2, 14), 80, cost=30, additional=2),
]


class ProcessSalesDataTest(unittest.TestCase):
    def test_daily_buckets_are_sorted_and_charge_additional_cost_once(self):
        report = process_sales_data(SALES, timeframe="daily")
        periods = [bucket.period for bucket in report.buckets]
        self.assertEqual(periods, sorted(periods))
        self.assertEqual(periods[0], "2024-01-05")

        first, second = report.buckets[0], report.buckets[1]
        self.assertAlmostEqual(first.profit, 100 - 8 - 40 - 5)
        self.assertAlmostEqual(second.profit, 50 - 4 - 20)

    def test_monthly_from_daily_matches_direct_monthly(self):
        direct = process_sales_data(SALES, timeframe="monthly")
        derived = aggregate_monthly_report(process_sales_data(SALES, timeframe="daily"))

        self.assertEqual(
            [bucket.period for bucket in direct.buckets],
            [bucket.period for bucket in derived.buckets],
        )
        for left, right in zip(direct.buckets, derived.buckets):
            self.assertAlmostEqual(left.revenue, right.revenue)
            self.assertAlmostEqual(left.profit, right.profit)
            self.assertEqual(left.orders, right.orders)
        self.assertAlmostEqual(direct.totals["net_profit"], derived.totals["net_profit"])
        self.assertEqual(direct.totals["orders"], derived.totals["orders"])

    def test_orders_spanning_buckets_count_once_in_totals(self):
        report = process_sales_data(SALES, timeframe="monthly")
        self.assertEqual(report.totals["orders"], 3)
        by_period = {bucket.period: bucket for bucket in report.buckets}
        self.assertEqual(by_period["2024-01"].orders, 2)
        self.assertEqual(by_period["2024-02"].orders, 2)

    def test_cancellation_losses_reduce_net_profit(self):
        losses = [{"sale_id": 5, "total_loss": 84}]
        report = process_sales_data(SALES, losses, timeframe="monthly")
        february = report.buckets[-1]
        self.assertAlmostEqual(february.losses, 84)
        self.assertAlmostEqual(february.net_profit, february.profit - 84)
        self.assertAlmostEqual(report.totals["losses"], 84)

    def test_empty_input(self):
        report = process_sales_data([], timeframe="daily")
        self.assertEqual(report.buckets, [])
        self.assertEqual(report.totals["profit_margin"], 0)
        self.assertEqual(report.totals["orders"], 0)

    def test_invalid_timeframe(self):
        with self.assertRaises(ValueError):
            process_sales_data(SALES, timeframe="weekly")

    def test_bucket_key_accepts_iso_strings(self):
        self.assertEqual(bucket_key("2024-03-09T10:00:00", "daily"), "2024-03-09")
        self.assertEqual(bucket_key("2024-03-09", "monthly"), "2024-03")
        with self.assertRaises(ValueError):
            bucket_key(None, "daily")

    def test_as_dict_shape(self):
        payload = process_sales_data(SALES[:1], timeframe="daily").as_dict()
        self.assertEqual(payload["timeframe"], "daily")
        self.assertEqual(
            set(payload["buckets"][0]),
            {"period", "revenue", "profit", "losses", "net_profit", "orders"},
        )


if __name__ == "__main__":
    unittest.main()
