import argparse
import sys
from datetime import date, timedelta
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from sqlalchemy import delete, select

from seller_ops.core.logging import setup_logging
from seller_ops.database import init_db, session_scope
from seller_ops.models import AIRecommendation, AppSettings, CanceledOrder, Product, ProductBatch, Profile, Sale
from seller_ops.services.inventory_service import create_product
from seller_ops.services.sales_service import cancel_sale, record_sale
from seller_ops.services.settings_service import setup_new_user

SAMPLE_PRODUCTS = [
    {"sku": "MUG-001", "name": "Ceramic Mug", "quantity": 120, "cost_per_item": 3.10, "supplier": "Northwind"},
    {"sku": "LMP-002", "name": "Desk Lamp", "quantity": 18, "cost_per_item": 14.50, "supplier": "Contoso"},
    {"sku": "BTL-003", "name": "Steel Bottle", "quantity": 4, "cost_per_item": 6.25, "supplier": "Northwind"},
]


def parse_args():
    parser = argparse.ArgumentParser(description="Seed sample seller data.")
    parser.add_argument("--user-id", default="demo-user", help="Owner of the seeded rows.")
    parser.add_argument("--admin", action="store_true", help="Mark the seeded user as an admin.")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Clear existing data before seeding.",
    )
    return parser.parse_args()


def main():
    setup_logging()
    args = parse_args()
    init_db()

    with session_scope() as db:
        if args.reset:
            for model in (CanceledOrder, AIRecommendation, Sale, ProductBatch, Product, AppSettings, Profile):
                db.execute(delete(model))
            db.commit()

        has_product = db.execute(
            select(Product.id).where(Product.user_id == args.user_id).limit(1)
        ).first()
        if has_product:
            print("Seed skipped: products already exist for {}.".format(args.user_id))
            return

        result = setup_new_user(db, args.user_id, email="{}@example.com".format(args.user_id))
        if args.admin:
            result["profile"].is_admin = True
            db.commit()

        start = date.today() - timedelta(days=40)
        for product in SAMPLE_PRODUCTS:
            create_product(db, args.user_id, dict(product, purchase_date=start))

        sales = []
        for offset in range(0, 40, 3):
            sale_date = start + timedelta(days=offset)
            order_number = "ORD-{:04d}".format(offset)
            sales.append(
                record_sale(
                    db,
                    args.user_id,
                    {
                        "sku": "MUG-001",
                        "order_number": order_number,
                        "quantity_sold": 2,
                        "sale_price": 9.99,
                        "shipping_fee_per_unit": 1.50,
                        "additional_costs": 2.75,
                        "sale_date": sale_date,
                    },
                )
            )
            if offset % 9 == 0:
                record_sale(
                    db,
                    args.user_id,
                    {
                        "sku": "LMP-002",
                        "order_number": order_number,
                        "quantity_sold": 1,
                        "sale_price": 24.00,
                        "sale_date": sale_date,
                    },
                )

        cancel_sale(db, args.user_id, sales[-1].id, cancellation_type="after_shipping")
        print("Seeded {} products and {} orders for {}.".format(len(SAMPLE_PRODUCTS), len(sales), args.user_id))


if __name__ == "__main__":
    main()
