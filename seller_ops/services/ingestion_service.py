import logging
from datetime import date, datetime
from pathlib import Path

from openpyxl import load_workbook
from sqlalchemy.exc import SQLAlchemyError

from seller_ops.database import SessionLocal, init_db
from seller_ops.services.inventory_service import create_product
from seller_ops.services.sales_service import record_sale

logger = logging.getLogger(__name__)

_ALIAS_SPECS = (
    (("sku",), "sku"),
    (("item", "sku"), "sku"),
    (("seller", "sku"), "sku"),
    (("product", "sku"), "sku"),
    (("product", "name"), "name"),
    (("item", "name"), "name"),
    (("title",), "name"),
    (("qty",), "quantity"),
    (("quantity", "purchased"), "quantity"),
    (("purchased", "qty"), "quantity"),
    (("cost",), "cost_per_item"),
    (("unit", "cost"), "cost_per_item"),
    (("cost", "per", "unit"), "cost_per_item"),
    (("cost", "per", "item"), "cost_per_item"),
    (("purchase", "price"), "cost_per_item"),
    (("supplier", "name"), "supplier"),
    (("vendor",), "supplier"),
    (("product", "link"), "product_link"),
    (("image",), "image_url"),
    (("image", "url"), "image_url"),
    (("notes",), "remarks"),
    (("purchase", "date"), "purchase_date"),
    (("batch",), "batch_reference"),
    (("order", "id"), "order_number"),
    (("order", "no"), "order_number"),
    (("po", "number"), "order_number"),
    (("order", "date"), "sale_date"),
    (("date",), "sale_date"),
    (("order", "quantity"), "quantity_sold"),
    (("qty", "sold"), "quantity_sold"),
    (("units", "sold"), "quantity_sold"),
    (("price",), "sale_price"),
    (("item", "price"), "sale_price"),
    (("unit", "price"), "sale_price"),
    (("shipping", "fee"), "shipping_fee_per_unit"),
    (("shipping", "fee", "per", "unit"), "shipping_fee_per_unit"),
    (("shipping", "income"), "shipping_fee_per_unit"),
    (("fulfillment", "cost"), "additional_costs"),
    (("additional", "cost"), "additional_costs"),
    (("cogs",), "cost_per_unit"),
)

HEADER_ALIASES = {"".join(parts): target for parts, target in _ALIAS_SPECS}

# Order sheets share column names with purchase sheets; these remap after aliasing.
_ORDER_COLUMN_OVERRIDES = {
    "quantity": "quantity_sold",
    "cost_per_item": "cost_per_unit",
    "name": "product_name",
    "purchase_date": "sale_date",
}

REQUIRED_COLUMNS = {
    "inventory": {"sku", "name", "quantity", "cost_per_item"},
    "orders": {"sku", "quantity_sold", "sale_price"},
}

DEFAULT_SHEET_ORDER = ["inventory", "orders"]
_SHEET_ALIASES = {
    "products": "inventory",
    "purchases": "inventory",
    "stock": "inventory",
    "sales": "orders",
    "order": "orders",
}


def _is_blank(value):
    return value is None or (isinstance(value, str) and not value.strip())


def normalize_header(value):
    if value is None:
        return ""
    value_text = str(value).strip().lower()
    if not value_text:
        return ""
    for char in (" ", "-", ".", "/", "(", ")", "#"):
        value_text = value_text.replace(char, "_")
    value_text = "_".join(part for part in value_text.split("_") if part)
    alias = HEADER_ALIASES.get(value_text)
    if alias:
        return alias
    alias = HEADER_ALIASES.get(value_text.replace("_", ""))
    if alias:
        return alias
    return value_text


def normalize_sheet_name(name):
    value_text = str(name).strip().lower()
    if not value_text:
        return ""
    for char in (" ", "-", ".", "/"):
        value_text = value_text.replace(char, "_")
    value_text = "_".join(part for part in value_text.split("_") if part)
    return _SHEET_ALIASES.get(value_text, value_text)


def normalize_sheet_list(value):
    if not value:
        return None
    if isinstance(value, (list, tuple, set)):
        items = [str(item).strip() for item in value if str(item).strip()]
    else:
        items = [part.strip() for part in str(value).split(",") if part.strip()]
    return items or None


def to_str(value, field, required=True):
    if _is_blank(value):
        if required:
            raise ValueError(f"{field} is required")
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def to_int(value, field, required=True):
    if _is_blank(value):
        if required:
            raise ValueError(f"{field} is required")
        return None
    if isinstance(value, bool):
        raise ValueError(f"{field} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value.is_integer():
            return int(value)
        raise ValueError(f"{field} must be an integer")
    value_text = str(value).strip().replace(",", "")
    try:
        numeric = float(value_text)
    except ValueError:
        raise ValueError(f"{field} must be an integer") from None
    if not numeric.is_integer():
        raise ValueError(f"{field} must be an integer")
    return int(numeric)


def to_float(value, field, required=True):
    if _is_blank(value):
        if required:
            raise ValueError(f"{field} is required")
        return None
    if isinstance(value, str):
        value = value.replace(",", "").replace("$", "").strip()
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{field} must be a number") from None


def to_date(value, field, required=True):
    if _is_blank(value):
        if required:
            raise ValueError(f"{field} is required")
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        value_text = value.strip()
        try:
            return date.fromisoformat(value_text[:10])
        except ValueError:
            pass
        for fmt in ("%Y/%m/%d", "%m/%d/%Y", "%d/%m/%Y"):
            try:
                return datetime.strptime(value_text, fmt).date()
            except ValueError:
                continue
    raise ValueError(f"{field} must be a date (YYYY-MM-DD)")


def load_sheet_rows(worksheet, sheet_name=None):
    rows_iter = worksheet.iter_rows(values_only=True)
    headers = next(rows_iter, None)
    if not headers:
        return [], set()
    header_keys = [normalize_header(header) for header in headers]
    if sheet_name == "orders":
        header_keys = [_ORDER_COLUMN_OVERRIDES.get(key, key) for key in header_keys]
    indices = [(idx, key) for idx, key in enumerate(header_keys) if key]
    columns = {key for key in header_keys if key}

    rows = []
    for row_number, row in enumerate(rows_iter, start=2):
        if row is None or all(_is_blank(value) for value in row):
            continue
        record = {key: row[idx] if idx < len(row) else None for idx, key in indices}
        record["_row"] = row_number
        rows.append(record)
    return rows, columns


def validate_columns(sheet_name, columns):
    required = REQUIRED_COLUMNS[sheet_name]
    missing = sorted(required - columns)
    if missing:
        missing_text = ", ".join(missing)
        raise ValueError(f"{sheet_name} sheet missing columns: {missing_text}")


def build_purchase_values(row):
    return {
        "sku": to_str(row.get("sku"), "sku"),
        "name": to_str(row.get("name"), "name"),
        "quantity": to_int(row.get("quantity"), "quantity"),
        "cost_per_item": to_float(row.get("cost_per_item"), "cost_per_item"),
        "supplier": to_str(row.get("supplier"), "supplier", required=False),
        "source": to_str(row.get("source"), "source", required=False),
        "image_url": to_str(row.get("image_url"), "image_url", required=False),
        "product_link": to_str(row.get("product_link"), "product_link", required=False),
        "remarks": to_str(row.get("remarks"), "remarks", required=False),
        "purchase_date": to_date(row.get("purchase_date"), "purchase_date", required=False),
        "batch_reference": to_str(row.get("batch_reference"), "batch_reference", required=False),
    }


def build_sale_values(row):
    return {
        "sku": to_str(row.get("sku"), "sku"),
        "product_name": to_str(row.get("product_name"), "product_name", required=False),
        "order_number": to_str(row.get("order_number"), "order_number", required=False),
        "quantity_sold": to_int(row.get("quantity_sold"), "quantity_sold"),
        "sale_price": to_float(row.get("sale_price"), "sale_price"),
        "shipping_fee_per_unit": to_float(row.get("shipping_fee_per_unit"), "shipping_fee_per_unit", required=False),
        "cost_per_unit": to_float(row.get("cost_per_unit"), "cost_per_unit", required=False),
        "additional_costs": to_float(row.get("additional_costs"), "additional_costs", required=False),
        "sale_date": to_date(row.get("sale_date"), "sale_date", required=False),
    }


def import_rows(db, user_id, sheet_name, rows):
    counts = {"inserted": 0, "updated": 0, "skipped": 0}
    for row in rows:
        try:
            if sheet_name == "inventory":
                _, action = create_product(db, user_id, build_purchase_values(row), commit=False)
            elif sheet_name == "orders":
                record_sale(db, user_id, build_sale_values(row), commit=False)
                action = "inserted"
            else:
                raise ValueError(f"Unsupported sheet: {sheet_name}")
        except ValueError as exc:
            raise ValueError("{} row {}: {}".format(sheet_name, row.get("_row", "?"), exc)) from exc
        counts[action] += 1
    return counts


def import_workbook(workbook_path, user_id, sheets=None, dry_run=False, db=None):
    workbook_path = Path(workbook_path)
    if not workbook_path.exists():
        raise FileNotFoundError(f"File not found: {workbook_path}")
    if workbook_path.suffix.lower() != ".xlsx":
        raise ValueError("Only .xlsx files are supported.")
    if not user_id:
        raise ValueError("user_id is required")

    workbook = load_workbook(workbook_path, data_only=True)
    sheet_map = {normalize_sheet_name(name): name for name in workbook.sheetnames}

    sheet_list = normalize_sheet_list(sheets)
    if sheet_list:
        requested = [normalize_sheet_name(name) for name in sheet_list]
    else:
        requested = [name for name in DEFAULT_SHEET_ORDER if name in sheet_map]
    if not requested:
        raise ValueError("No matching sheets found to import.")

    owns_session = db is None
    if owns_session:
        init_db()
        db = SessionLocal()

    results = {}
    try:
        for sheet_key in requested:
            actual_name = sheet_map.get(sheet_key)
            if not actual_name:
                raise ValueError(f"Sheet not found: {sheet_key}")
            rows, columns = load_sheet_rows(workbook[actual_name], sheet_key)
            validate_columns(sheet_key, columns)
            results[sheet_key] = import_rows(db, user_id, sheet_key, rows)

        if dry_run:
            db.rollback()
        else:
            db.commit()
    except (SQLAlchemyError, ValueError):
        db.rollback()
        raise
    finally:
        if owns_session:
            db.close()

    logger.info("Imported %s for user %s: %s", workbook_path.name, user_id, summarize_results(results))
    return results


def summarize_results(results):
    parts = []
    for sheet_name, counts in results.items():
        parts.append(
            "{}: {} inserted, {} updated".format(
                sheet_name,
                counts.get("inserted", 0),
                counts.get("updated", 0),
            )
        )
    return "; ".join(parts) if parts else "no rows"
