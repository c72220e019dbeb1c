import unittest
from datetime import date, timedelta
from unittest.mock import patch

from seller_ops.services import ai_service
from seller_ops.services.sales_service import record_sale
from tests.support import make_test_session_factory

USER = "user-ai"

PRODUCTS = [
    {"name": "Blue Mug", "sku": "MUG-1", "profit_margin": 35.0, "quantity_sold": 12, "total_profit": 120.0},
    {
        "name": "Red Scarf",
        "sku": "SCF-1",
        "profit_margin": -4.0,
        "quantity_sold": 3,
        "total_profit": -6.0,
        "profit_margin_trend": -12.5,
        "quantity_trend": 50.0,
    },
]

SUGGESTION = """1. **Product: Red Scarf (SKU: SCF-1)**
   **Action:** Increase Price by 10%
   **Reasoning:** Negative margin with declining trend."""


class PromptTest(unittest.TestCase):
    def test_summary_lines_include_trends_when_known(self):
        summary = ai_service.summarize_products(PRODUCTS)
        first, second = summary.splitlines()
        self.assertEqual(
            first,
            "- Product: Blue Mug (SKU: MUG-1), Margin: 35.0%, Units Sold: 12, Total Profit: $120.00",
        )
        self.assertTrue(second.endswith("Margin Trend: -12.5%, Sales Trend: +50.0%"))

    def test_plan_prompt_lists_each_product(self):
        prompt = ai_service.build_plan_prompt(PRODUCTS)
        self.assertIn("the 2 worst-performing products", prompt)
        self.assertIn("Product: Red Scarf (SKU: SCF-1)", prompt)
        self.assertIn("Profit Margin Trend: -12.5%", prompt)
        self.assertEqual(prompt.count("\n---\n"), 1)


class GenerateTest(unittest.TestCase):
    def setUp(self):
        self.db = make_test_session_factory()()

    def tearDown(self):
        self.db.close()

    def test_suggestions_are_stored_and_parsed(self):
        with patch.object(ai_service, "complete_chat", return_value=SUGGESTION) as chat:
            result = ai_service.generate_product_suggestions(self.db, USER, products=PRODUCTS)

        self.assertEqual(chat.call_args.kwargs["max_tokens"], ai_service.SUGGESTION_MAX_TOKENS)
        self.assertEqual(result["parsed"][0]["sku"], "SCF-1")
        self.assertEqual(result["parsed"][0]["action"], "Increase Price by 10%")

        stored = ai_service.latest_recommendation(self.db, USER, "product_performance")
        self.assertEqual(stored.id, result["recommendation_id"])
        self.assertEqual(stored.recommendation_text, SUGGESTION)

    def test_worst_plan_ranks_negative_margins_first(self):
        with patch.object(ai_service, "complete_chat", return_value="Plan text") as chat:
            result = ai_service.generate_worst_product_plan(self.db, USER, products=PRODUCTS)

        self.assertEqual(chat.call_args.kwargs["temperature"], ai_service.PLAN_TEMPERATURE)
        self.assertEqual([item["sku"] for item in result["product_details"]], ["SCF-1", "MUG-1"])
        self.assertEqual(result["plan"], "Plan text")

    def test_products_default_to_recent_sales(self):
        record_sale(
            self.db,
            USER,
            {"sku": "GHOST", "product_name": "Ghost", "quantity_sold": 1, "sale_price": 10, "sale_date": date.today() - timedelta(days=1)},
        )
        with patch.object(ai_service, "complete_chat", return_value=SUGGESTION) as chat:
            ai_service.generate_product_suggestions(self.db, USER, time_range="week")
        self.assertIn("SKU: GHOST", chat.call_args.args[1])

    def test_no_data_is_rejected_before_calling_the_model(self):
        with patch.object(ai_service, "complete_chat") as chat:
            with self.assertRaises(ValueError):
                ai_service.generate_product_suggestions(self.db, USER, products=[])
        chat.assert_not_called()

    def test_latest_recommendation_missing(self):
        with self.assertRaises(LookupError):
            ai_service.latest_recommendation(self.db, USER, "worst_product_plan")


if __name__ == "__main__":
    unittest.main()
