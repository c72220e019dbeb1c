import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from seller_ops.config import Settings
from seller_ops.core.security import create_access_token
from seller_ops.dependencies import get_db, require_user
from seller_ops.main import app
from seller_ops.models.profile import Profile
from tests.support import make_test_session_factory

USER = "api-user"


class ApiTestCase(unittest.TestCase):
    def setUp(self):
        self.session_factory = make_test_session_factory()

        def override_get_db():
            db = self.session_factory()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[require_user] = lambda: USER
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()

    def _make_admin(self):
        db = self.session_factory()
        try:
            db.add(Profile(id=USER, is_admin=True))
            db.commit()
        finally:
            db.close()


class HealthApiTest(ApiTestCase):
    def test_health_and_keep_alive(self):
        self.assertEqual(self.client.get("/health").json()["status"], "ok")
        response = self.client.post("/cron/keep-alive")
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["success"])


class InventoryApiTest(ApiTestCase):
    def test_product_and_sale_flow(self):
        response = self.client.post(
            "/products",
            json={"sku": "MUG-1", "name": "Mug", "quantity": 10, "cost_per_item": 4, "purchase_date": "2024-01-01"},
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["quantity"], 10)

        response = self.client.post(
            "/sales",
            json={"sku": "MUG-1", "quantity_sold": 2, "sale_price": 10, "order_number": "A-1", "sale_date": "2024-02-01"},
        )
        self.assertEqual(response.status_code, 201)
        sale = response.json()
        self.assertAlmostEqual(sale["net_profit"], 20 - 1.6 - 8)

        self.assertEqual(self.client.get("/products/MUG-1").json()["quantity"], 8)
        self.assertEqual(len(self.client.get("/products/MUG-1/batches").json()), 1)

        response = self.client.post("/sales/{}/cancel".format(sale["id"]), json={"cancellation_type": "before_shipping"})
        self.assertEqual(response.status_code, 201)
        self.assertAlmostEqual(response.json()["total_loss"], 20)

        report = self.client.get("/analytics/reports", params={"timeframe": "monthly"}).json()
        self.assertAlmostEqual(report["totals"]["losses"], 20)

        breakdown = self.client.get("/analytics/profit-breakdown").json()
        self.assertEqual(breakdown["total_revenue"], 0)

    def test_errors_map_to_status_codes(self):
        self.assertEqual(self.client.get("/products/NOPE").status_code, 404)
        self.assertEqual(self.client.post("/sales/999/cancel", json={"cancellation_type": "after_shipping"}).status_code, 404)
        self.assertEqual(self.client.post("/sales", json={"sku": "X", "quantity_sold": 0, "sale_price": 1}).status_code, 422)
        self.client.post("/products", json={"sku": "MUG-1", "name": "Mug"})
        response = self.client.patch("/products/MUG-1", json={"status": "low_stock"})
        self.assertEqual(response.status_code, 400)

    def test_analytics_endpoints_respond(self):
        for path in (
            "/analytics/product-trends",
            "/analytics/summary",
            "/analytics/products",
            "/analytics/inventory-health",
            "/analytics/reorder-recommendations",
            "/sales/cancellations/summary",
            "/settings",
        ):
            self.assertEqual(self.client.get(path).status_code, 200, path)


class SettingsApiTest(ApiTestCase):
    def test_update_settings(self):
        response = self.client.put("/settings", json={"minimum_profit_margin": 15})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["minimum_profit_margin"], 15)
        self.assertEqual(self.client.put("/settings", json={"minimum_profit_margin": 150}).status_code, 422)


class AiApiTest(ApiTestCase):
    def test_suggestions_and_latest(self):
        products = [{"sku": "MUG-1", "name": "Mug", "profit_margin": 5, "quantity_sold": 3, "total_profit": 2}]
        with patch("seller_ops.services.ai_service.complete_chat", return_value="Product: Mug (SKU: MUG-1)"):
            response = self.client.post("/ai/product-suggestions", json={"products": products})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["parsed"][0]["sku"], "MUG-1")

        latest = self.client.get("/ai/recommendations/latest")
        self.assertEqual(latest.status_code, 200)
        self.assertEqual(latest.json()["recommendation_text"], "Product: Mug (SKU: MUG-1)")

    def test_model_failure_is_bad_gateway(self):
        products = [{"sku": "MUG-1", "profit_margin": -5}]
        with patch("seller_ops.services.ai_service.complete_chat", side_effect=RuntimeError("LLM API error: HTTP 503")):
            response = self.client.post("/ai/worst-product-plan", json={"products": products})
        self.assertEqual(response.status_code, 502)

    def test_empty_product_list(self):
        response = self.client.post("/ai/product-suggestions", json={"products": []})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "No product data provided")


class AdminApiTest(ApiTestCase):
    def test_requires_admin(self):
        self.assertEqual(self.client.get("/admin/users").status_code, 403)

    def test_invitation_lifecycle(self):
        self._make_admin()
        response = self.client.post("/admin/invitations", json={"code": "JOINUS1", "is_admin": False})
        self.assertEqual(response.status_code, 201)

        valid = self.client.post("/auth/validate-invitation", json={"code": "JOINUS1"}).json()
        self.assertTrue(valid["valid"])
        self.assertEqual(self.client.post("/auth/validate-invitation", json={"code": ""}).status_code, 400)

        self.assertTrue(self.client.post("/auth/use-invitation", json={"code": "JOINUS1"}).json()["success"])
        self.assertFalse(self.client.post("/auth/validate-invitation", json={"code": "JOINUS1"}).json()["valid"])

        users = self.client.get("/admin/users").json()
        self.assertEqual([user["id"] for user in users], [USER])

    def test_migration_requires_file(self):
        self._make_admin()
        response = self.client.post("/admin/migrations/apply", json={"migration_file": ""})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "Migration file path is required")

    def test_setup_new_user(self):
        response = self.client.post("/auth/setup-new-user", json={"first_name": "Ada"})
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["created"])
        self.assertEqual(response.json()["settings"]["label_cost"], 1.0)


class BearerAuthTest(unittest.TestCase):
    def setUp(self):
        self.session_factory = make_test_session_factory()

        def override_get_db():
            db = self.session_factory()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        self.client = TestClient(app)
        self.patcher = patch(
            "seller_ops.core.security.get_settings",
            return_value=Settings(JWT_SECRET="test-secret"),
        )
        self.patcher.start()

    def tearDown(self):
        self.patcher.stop()
        app.dependency_overrides.clear()

    def test_missing_and_invalid_tokens(self):
        self.assertEqual(self.client.get("/products").status_code, 401)
        response = self.client.get("/products", headers={"Authorization": "Bearer not-a-token"})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["detail"], "Invalid JWT")

    def test_valid_token_scopes_data_to_subject(self):
        token = create_access_token("token-user")
        headers = {"Authorization": "Bearer {}".format(token)}
        self.client.post("/products", json={"sku": "A-1", "name": "Alpha"}, headers=headers)

        self.assertEqual(len(self.client.get("/products", headers=headers).json()), 1)
        other = create_access_token("someone-else")
        self.assertEqual(self.client.get("/products", headers={"Authorization": "Bearer {}".format(other)}).json(), [])


if __name__ == "__main__":
    unittest.main()
