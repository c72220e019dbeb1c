import unittest
from datetime import date, datetime, timedelta, timezone

from seller_ops.models.invitation import Invitation
from seller_ops.models.product_batch import ProductBatch
from seller_ops.services import invitation_service, inventory_service, sales_service, settings_service
from tests.support import make_test_session_factory

USER = "user-1"


class ServiceTestCase(unittest.TestCase):
    def setUp(self):
        self.db = make_test_session_factory()()

    def tearDown(self):
        self.db.close()

    def _stock(self, sku="MUG-1"):
        product, action = inventory_service.create_product(
            self.db,
            USER,
            {"sku": sku, "name": "Mug", "quantity": 10, "cost_per_item": 4, "purchase_date": date(2024, 1, 1)},
        )
        self.assertEqual(action, "inserted")
        product, action = inventory_service.create_product(
            self.db,
            USER,
            {"sku": sku, "quantity": 10, "cost_per_item": 6, "purchase_date": date(2024, 2, 1)},
        )
        self.assertEqual(action, "updated")
        return product


class InventoryServiceTest(ServiceTestCase):
    def test_batches_drive_product_aggregates(self):
        product = self._stock()
        self.assertEqual(product.quantity, 20)
        self.assertEqual(product.total_purchased, 20)
        self.assertAlmostEqual(product.cost_per_item, 5)
        self.assertAlmostEqual(product.stock_value, 100)
        self.assertEqual(product.status, "active")
        self.assertEqual(len(inventory_service.load_batches(self.db, product.id)), 2)

    def test_new_product_requires_name(self):
        with self.assertRaises(ValueError):
            inventory_service.create_product(self.db, USER, {"sku": "X-1", "quantity": 1})

    def test_products_are_scoped_to_user(self):
        self._stock()
        self.assertEqual(inventory_service.list_products(self.db, "someone-else"), [])
        with self.assertRaises(LookupError):
            inventory_service.get_product(self.db, "someone-else", "MUG-1")

    def test_restock_keeps_product_inactive(self):
        self._stock()
        product = inventory_service.deactivate_product(self.db, USER, "MUG-1")
        self.assertEqual(product.status, "inactive")
        self.assertEqual(inventory_service.list_products(self.db, USER, include_inactive=False), [])

        inventory_service.record_purchase(self.db, product, 2, 5)
        self.assertEqual(product.status, "inactive")
        self.assertEqual(product.quantity, 22)

        product, _ = inventory_service.create_product(self.db, USER, {"sku": "MUG-1", "quantity": 1, "cost_per_item": 5})
        self.assertEqual(product.status, "inactive")

        product = inventory_service.update_product(self.db, USER, "MUG-1", {"status": "active"})
        self.assertEqual(product.status, "active")

    def test_restock_cost_is_batch_weighted(self):
        product = self._stock()
        inventory_service.record_purchase(self.db, product, 20, 8)
        self.assertEqual(product.quantity, 40)
        self.assertAlmostEqual(product.cost_per_item, 6.5)

    def test_update_rejects_derived_status(self):
        self._stock()
        with self.assertRaises(ValueError):
            inventory_service.update_product(self.db, USER, "MUG-1", {"status": "low_stock"})
        with self.assertRaises(ValueError):
            inventory_service.update_product(self.db, USER, "MUG-1", {"quantity": 3})
        product = inventory_service.update_product(self.db, USER, "MUG-1", {"supplier": "Acme"})
        self.assertEqual(product.supplier, "Acme")


class SalesServiceTest(ServiceTestCase):
    def test_sale_consumes_oldest_batches(self):
        product = self._stock()
        sale = sales_service.record_sale(
            self.db,
            USER,
            {"sku": "MUG-1", "quantity_sold": 12, "sale_price": 10, "order_number": "1001", "sale_date": date(2024, 3, 1)},
        )
        self.assertEqual(sale.product_id, product.id)
        self.assertAlmostEqual(sale.cost_per_unit * 12, 52)
        self.assertAlmostEqual(sale.total_revenue, 120)
        self.assertAlmostEqual(sale.platform_fee, 9.6)
        self.assertAlmostEqual(sale.net_profit, 58.4)

        self.db.refresh(product)
        self.assertEqual(product.quantity, 8)
        self.assertEqual(product.sales_qty, 12)
        self.assertAlmostEqual(product.cost_per_item, 6)

    def test_shortfall_creates_adjustment_batch(self):
        product = self._stock()
        sales_service.record_sale(self.db, USER, {"sku": "MUG-1", "quantity_sold": 25, "sale_price": 9})
        self.db.refresh(product)
        self.assertEqual(product.quantity, 0)
        self.assertEqual(product.status, "out_of_stock")
        references = [
            batch.batch_reference for batch in self.db.query(ProductBatch).filter_by(product_id=product.id)
        ]
        self.assertIn("auto-adjustment", references)

    def test_unknown_sku_is_recorded_without_product(self):
        sale = sales_service.record_sale(
            self.db, USER, {"sku": "GHOST", "quantity_sold": 1, "sale_price": 20, "cost_per_unit": 5}
        )
        self.assertIsNone(sale.product_id)
        self.assertAlmostEqual(sale.net_profit, 20 - 1.6 - 5)

    def test_order_cost_charged_to_first_line_only(self):
        first = sales_service.record_sale(
            self.db,
            USER,
            {"sku": "GHOST", "quantity_sold": 1, "sale_price": 100, "cost_per_unit": 40,
             "additional_costs": 5, "order_number": "A"},
        )
        second = sales_service.record_sale(
            self.db,
            USER,
            {"sku": "GHOST-2", "quantity_sold": 1, "sale_price": 50, "cost_per_unit": 20,
             "additional_costs": 5, "order_number": "A"},
        )
        self.assertAlmostEqual(first.net_profit, 47)
        self.assertAlmostEqual(second.net_profit, 26)
        self.assertAlmostEqual(second.additional_costs, 5)
        self.assertAlmostEqual(first.net_profit + second.net_profit, 73)

    def test_order_cost_charged_once_within_one_transaction(self):
        lines = [
            {"sku": "GHOST", "quantity_sold": 1, "sale_price": 100, "cost_per_unit": 40, "additional_costs": 5},
            {"sku": "GHOST-2", "quantity_sold": 1, "sale_price": 50, "cost_per_unit": 20, "additional_costs": 5},
        ]
        sales = [
            sales_service.record_sale(self.db, USER, dict(line, order_number="B"), commit=False)
            for line in lines
        ]
        self.db.commit()
        self.assertAlmostEqual(sum(sale.net_profit for sale in sales), 73)

    def test_sale_validation(self):
        with self.assertRaises(ValueError):
            sales_service.record_sale(self.db, USER, {"sku": "A", "quantity_sold": 0, "sale_price": 1})
        with self.assertRaises(ValueError):
            sales_service.record_sale(self.db, USER, {"sku": "A", "quantity_sold": 1})

    def test_cancel_after_shipping_uses_user_costs(self):
        sale = sales_service.record_sale(
            self.db, USER, {"sku": "GHOST", "quantity_sold": 1, "sale_price": 30}
        )
        canceled = sales_service.cancel_sale(self.db, USER, sale.id, cancellation_type="after_shipping")
        self.assertAlmostEqual(canceled.refund_amount, 30)
        self.assertAlmostEqual(canceled.total_loss, 36)
        self.assertAlmostEqual(canceled.shipping_cost_loss, 6)
        self.assertEqual(self.db.get(type(sale), sale.id).status, "canceled")

        summary = sales_service.cancellation_summary(self.db, USER)
        self.assertEqual(summary["after_shipping_orders"], 1)
        self.assertAlmostEqual(summary["total_loss"], 36)

        with self.assertRaises(ValueError):
            sales_service.cancel_sale(self.db, USER, sale.id, cancellation_type="after_shipping")

    def test_cancel_checks_owner_and_type(self):
        sale = sales_service.record_sale(self.db, USER, {"sku": "GHOST", "quantity_sold": 1, "sale_price": 30})
        with self.assertRaises(LookupError):
            sales_service.cancel_sale(self.db, "intruder", sale.id, cancellation_type="before_shipping")
        with self.assertRaises(ValueError):
            sales_service.cancel_sale(self.db, USER, sale.id, cancellation_type="lost_in_mail")

    def test_list_sales_filters(self):
        for day in (date(2024, 1, 1), date(2024, 1, 15), date(2024, 2, 1)):
            sales_service.record_sale(
                self.db, USER, {"sku": "GHOST", "quantity_sold": 1, "sale_price": 5, "sale_date": day}
            )
        january = sales_service.list_sales(
            self.db, USER, start_date=date(2024, 1, 1), end_date=date(2024, 1, 31)
        )
        self.assertEqual(len(january), 2)


class SettingsServiceTest(ServiceTestCase):
    def test_defaults_created_on_first_read(self):
        settings = settings_service.get_or_create_settings(self.db, USER)
        self.assertAlmostEqual(settings.minimum_profit_margin, 10)
        self.assertFalse(settings.auto_reorder_enabled)

    def test_update_validation(self):
        with self.assertRaises(ValueError):
            settings_service.update_settings(self.db, USER, {"minimum_profit_margin": 120})
        with self.assertRaises(ValueError):
            settings_service.update_settings(self.db, USER, {"label_cost": -1})
        with self.assertRaises(ValueError):
            settings_service.update_settings(self.db, USER, {"theme": "dark"})
        settings = settings_service.update_settings(self.db, USER, {"auto_reorder_enabled": True})
        self.assertTrue(settings.auto_reorder_enabled)

    def test_setup_new_user_is_idempotent(self):
        first = settings_service.setup_new_user(self.db, USER, email="a@example.com", first_name="Ada")
        second = settings_service.setup_new_user(self.db, USER)
        self.assertTrue(first["created"])
        self.assertFalse(second["created"])
        self.assertEqual(second["profile"].first_name, "Ada")


class InvitationServiceTest(ServiceTestCase):
    def test_admin_invitation_promotes_user(self):
        invitation = invitation_service.create_invitation(self.db, "root", code="WELCOME1", is_admin=True)
        self.assertTrue(invitation_service.is_invitation_valid(self.db, "WELCOME1"))

        self.assertTrue(invitation_service.use_invitation(self.db, " WELCOME1 ", USER))
        self.assertTrue(invitation_service.is_admin(self.db, USER))
        self.assertFalse(invitation_service.is_invitation_valid(self.db, "WELCOME1"))
        self.assertFalse(invitation_service.use_invitation(self.db, "WELCOME1", "user-2"))

        with self.assertRaises(ValueError):
            invitation_service.revoke_invitation(self.db, invitation.id)

    def test_code_rules(self):
        with self.assertRaises(ValueError):
            invitation_service.create_invitation(self.db, "root", code="abc")
        invitation_service.create_invitation(self.db, "root", code="ABCDEF")
        with self.assertRaises(ValueError):
            invitation_service.create_invitation(self.db, "root", code="ABCDEF")
        with self.assertRaises(ValueError):
            invitation_service.is_invitation_valid(self.db, "  ")
        self.assertEqual(len(invitation_service.generate_code()), 12)

    def test_expired_and_revoked_codes_are_invalid(self):
        self.db.add(
            Invitation(
                code="OLDCODE",
                status="active",
                is_admin=False,
                expires_at=datetime.now(timezone.utc) - timedelta(days=1),
            )
        )
        self.db.commit()
        self.assertFalse(invitation_service.is_invitation_valid(self.db, "OLDCODE"))

        invitation = invitation_service.create_invitation(self.db, "root", code="REVOKE1")
        invitation_service.revoke_invitation(self.db, invitation.id)
        self.assertFalse(invitation_service.is_invitation_valid(self.db, "REVOKE1"))
        with self.assertRaises(LookupError):
            invitation_service.revoke_invitation(self.db, 9999)


if __name__ == "__main__":
    unittest.main()
