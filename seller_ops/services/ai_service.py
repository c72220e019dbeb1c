import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from seller_ops.core.records import get_field, number_field
from seller_ops.core.suggestions import parse_product_suggestions
from seller_ops.core.trends import rank_worst_products
from seller_ops.models.ai_recommendation import AIRecommendation
from seller_ops.services.analytics_service import product_trends
from seller_ops.services.llm_service import complete_chat

logger = logging.getLogger(__name__)

SUGGESTION_TEMPERATURE = 0.5
SUGGESTION_MAX_TOKENS = 300
PLAN_TEMPERATURE = 0.4
PLAN_MAX_TOKENS = 4000
WORST_PRODUCT_LIMIT = 10

SUGGESTION_SYSTEM_PROMPT = """You are an expert e-commerce analyst advising a marketplace seller. Your goal is to identify products needing attention to improve overall profitability, considering both current performance and recent trends.

Analyze the following product performance data. The data includes current profit margin, units sold, total profit, and recent trends (percentage change compared to the previous period) for profit margin and sales volume.

For each recommended product, follow this EXACT format:
1. **Product: [Product Name] (SKU: [Product SKU])**
   **Action:** [One of: "Discontinue", "Increase Price by X%", "Review Shipping Costs", "Review COGS", "Monitor Performance"]
   **Reasoning:** [Brief explanation incorporating current metrics AND trend data (e.g., "declining margin", "falling sales")]

Provide recommendations for 3-5 products. Focus on items with low/negative margins, low sales, OR significant negative trends (especially declining margins). Also suggest "Monitor Performance" for products that are currently okay but show worrying trends. Prioritize actions with the largest potential impact."""

PLAN_SYSTEM_PROMPT = """You are an expert e-commerce analyst helping a marketplace seller maximize profits. Your task is to identify issues with their worst-performing products and create specific, actionable plans to either improve performance or discontinue them strategically.

I will provide you with data for the worst-performing products. For EACH product, you must create a separate action plan following this EXACT format:

Action Plan for Worst-Performing Product: [Product Name]

Step 1 - Current Issues:
- [Clearly list 2-3 specific issues causing poor performance]

Step 2 - Short-term Pricing Strategy:
- [Provide 1-2 detailed price adjustments to temporarily increase profit margins or accelerate sales]

Step 3 - Shipping Optimization:
- [List 1-2 specific shipping-related strategies to maximize profitability]

Step 4 - Additional Recommendations (Optional):
- [Suggest 1 potential improvement such as better marketing, product listings, or bundling]

Step 5 - Discontinuation Strategy:
- Timeline: [Define a clear timeline, e.g., 30-60 days]
- Criteria for discontinuation: [Explicit criteria based on sales and profitability after adjustments]
- Liquidation method: [Specific method of final inventory liquidation]

After you create an action plan for each product, add a heading at the end called "Summary of Key Insights" with 3-5 bullet points of patterns or commonalities you observed across the problematic products."""


def _signed(value) -> str:
    return "{}{:.1f}%".format("+" if value >= 0 else "", value)


def _trend_suffix(product) -> str:
    parts = []
    margin_trend = get_field(product, "profit_margin_trend")
    if margin_trend is not None:
        parts.append("Margin Trend: {}".format(_signed(float(margin_trend))))
    quantity_trend = get_field(product, "quantity_trend")
    if quantity_trend is not None:
        parts.append("Sales Trend: {}".format(_signed(float(quantity_trend))))
    return "".join(", " + part for part in parts)


def summarize_products(products) -> str:
    lines = []
    for product in products:
        lines.append(
            "- Product: {} (SKU: {}), Margin: {:.1f}%, Units Sold: {:g}, Total Profit: ${:.2f}{}".format(
                get_field(product, "name", get_field(product, "sku", "")),
                get_field(product, "sku", ""),
                number_field(product, "profit_margin"),
                number_field(product, "quantity_sold"),
                number_field(product, "total_profit"),
                _trend_suffix(product),
            )
        )
    return "\n".join(lines)


def build_suggestion_prompt(products) -> str:
    return (
        "Product Performance Data (Current Period with Trends vs Previous Period):\n"
        "{}\n\n"
        "Based on this data, including the recent trends, provide your top 3-5 recommendations "
        "to improve or maintain profit margins using the required format. Pay close attention "
        "to declining trends."
    ).format(summarize_products(products))


def describe_worst_product(product) -> str:
    lines = [
        "Product: {} (SKU: {})".format(get_field(product, "name", ""), get_field(product, "sku", "")),
        "Profit Margin: {:.1f}%".format(number_field(product, "profit_margin")),
        "Total Revenue: ${:.2f}".format(number_field(product, "total_revenue")),
        "Total Profit: ${:.2f}".format(number_field(product, "total_profit")),
        "Quantity Sold: {:g}".format(number_field(product, "quantity_sold")),
        "Orders: {}".format(int(number_field(product, "order_count"))),
        "Average Quantity Per Order: {:.2f}".format(number_field(product, "avg_quantity_per_order")),
        "Last Sale Date: {}".format(get_field(product, "last_sale_date", "")),
    ]
    margin_trend = get_field(product, "profit_margin_trend")
    if margin_trend is not None:
        lines.append("Profit Margin Trend: {}".format(_signed(float(margin_trend))))
    quantity_trend = get_field(product, "quantity_trend")
    if quantity_trend is not None:
        lines.append("Sales Trend: {}".format(_signed(float(quantity_trend))))
    return "\n".join(lines)


def build_plan_prompt(products) -> str:
    summaries = "\n---\n".join(describe_worst_product(product) for product in products)
    return (
        "Here is detailed information about the {} worst-performing products in the inventory:\n\n"
        "{}\n\n"
        "Create a comprehensive action plan with concrete steps for EACH of these specific products "
        "following the required format. Base your analysis on the performance metrics provided. "
        "Ensure your response is formatted as a document that can be easily saved and shared with the team."
    ).format(len(products), summaries)


def store_recommendation(db: Session, user_id: str, recommendation_type: str, text: str, *, product_id=None, commit=True):
    recommendation = AIRecommendation(
        user_id=user_id,
        product_id=product_id,
        recommendation_type=recommendation_type,
        recommendation_text=text,
        is_applied=False,
    )
    db.add(recommendation)
    if commit:
        try:
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        db.refresh(recommendation)
    return recommendation


def _resolve_products(db, user_id, products, time_range):
    if products is None:
        products = product_trends(db, user_id, time_range=time_range)["products"]
    products = list(products)
    if not products:
        raise ValueError("No product data provided")
    return products


def generate_product_suggestions(db: Session, user_id: str, *, products=None, time_range: str = "month") -> dict:
    products = _resolve_products(db, user_id, products, time_range)
    suggestion = complete_chat(
        SUGGESTION_SYSTEM_PROMPT,
        build_suggestion_prompt(products),
        temperature=SUGGESTION_TEMPERATURE,
        max_tokens=SUGGESTION_MAX_TOKENS,
    )
    logger.info("Received product suggestions for user %s", user_id, extra={"user_id": user_id})
    record = store_recommendation(db, user_id, "product_performance", suggestion)
    return {
        "suggestion": suggestion,
        "parsed": parse_product_suggestions(suggestion),
        "recommendation_id": record.id,
    }


def generate_worst_product_plan(db: Session, user_id: str, *, products=None, time_range: str = "month") -> dict:
    products = _resolve_products(db, user_id, products, time_range)
    worst = rank_worst_products(products, WORST_PRODUCT_LIMIT)
    plan = complete_chat(
        PLAN_SYSTEM_PROMPT,
        build_plan_prompt(worst),
        temperature=PLAN_TEMPERATURE,
        max_tokens=PLAN_MAX_TOKENS,
    )
    logger.info(
        "Received worst-product plan for user %s (%d products)",
        user_id,
        len(worst),
        extra={"user_id": user_id},
    )
    record = store_recommendation(db, user_id, "worst_product_plan", plan)
    return {
        "plan": plan,
        "product_details": [
            {
                "name": get_field(product, "name", ""),
                "sku": get_field(product, "sku", ""),
                "profit_margin": number_field(product, "profit_margin"),
                "total_profit": number_field(product, "total_profit"),
            }
            for product in worst
        ],
        "recommendation_id": record.id,
    }


def latest_recommendation(db: Session, user_id: str, recommendation_type: str) -> AIRecommendation:
    recommendation = (
        db.execute(
            select(AIRecommendation)
            .where(
                AIRecommendation.user_id == user_id,
                AIRecommendation.recommendation_type == recommendation_type,
            )
            .order_by(AIRecommendation.created_at.desc(), AIRecommendation.id.desc())
            .limit(1)
        )
        .scalars()
        .first()
    )
    if recommendation is None:
        raise LookupError("No stored recommendation of type {}".format(recommendation_type))
    return recommendation
