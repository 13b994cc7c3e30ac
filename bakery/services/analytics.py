# =========================================================
# REPORTING / ANALYTICS
#
# Read-only aggregations for the dashboard and reports.
# Revenue only counts completed orders.
# =========================================================

from datetime import date, datetime, time, timedelta
from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from bakery.models.customers import Customer
from bakery.models.expenses import Expense
from bakery.models.inventory import InventoryItem
from bakery.models.order_items import OrderItem
from bakery.models.orders import Order
from bakery.models.parties import Party
from bakery.models.production import ProductionScheduleItem
from bakery.models.products import Product
from bakery.models.purchases import Purchase
from bakery.services.accounts import ACCOUNT_HISTORY_CATEGORIES


def _day_bounds(start_date: date, end_date: date):
    return datetime.combine(start_date, time.min), datetime.combine(end_date, time.max)


def dashboard_stats(db: Session, today: date) -> dict:
    start_dt, end_dt = _day_bounds(today, today)

    completed_today = [
        Order.status == "completed",
        Order.order_date.between(start_dt, end_dt),
    ]

    today_sales = (
        db.query(func.coalesce(func.sum(Order.total_amount), 0))
        .filter(*completed_today)
        .scalar()
    )

    today_orders = (
        db.query(func.count(Order.id))
        .filter(*completed_today)
        .scalar()
    )

    products_in_stock = db.query(func.count(InventoryItem.id)).scalar()

    low_stock_items = (
        db.query(func.count(InventoryItem.id))
        .filter(InventoryItem.current_stock <= InventoryItem.min_level)
        .scalar()
    )

    produced = func.coalesce(ProductionScheduleItem.actual_quantity, ProductionScheduleItem.quantity)
    production_today = (
        db.query(func.coalesce(func.sum(produced), 0))
        .filter(
            ProductionScheduleItem.status == "completed",
            ProductionScheduleItem.scheduled_date.between(start_dt, end_dt),
        )
        .scalar()
    )

    return {
        "today_sales": Decimal(today_sales or 0),
        "today_orders": today_orders or 0,
        "products_in_stock": products_in_stock or 0,
        "low_stock_items": low_stock_items or 0,
        "production_today": int(production_today or 0),
    }


def recent_orders(db: Session, limit: int = 10) -> list[Order]:
    return (
        db.query(Order)
        .options(selectinload(Order.items))
        .order_by(Order.order_date.desc(), Order.id.desc())
        .limit(limit)
        .all()
    )


def sales_analytics(db: Session, start_date: date | None = None, end_date: date | None = None) -> dict:
    end_date = end_date or date.today()
    start_date = start_date or end_date - timedelta(days=30)
    start_dt, end_dt = _day_bounds(start_date, end_date)

    base_filter = [
        Order.status == "completed",
        Order.order_date.between(start_dt, end_dt),
    ]

    day = func.date(Order.order_date)
    daily = (
        db.query(
            day.label("day"),
            func.coalesce(func.sum(Order.total_amount), 0).label("total_sales"),
            func.count(Order.id).label("order_count"),
        )
        .filter(*base_filter)
        .group_by(day)
        .order_by(day)
        .all()
    )

    top_products = (
        db.query(
            Product.name.label("name"),
            func.coalesce(func.sum(OrderItem.quantity), 0).label("quantity"),
            func.coalesce(func.sum(OrderItem.total_price), 0).label("revenue"),
        )
        .join(OrderItem, OrderItem.product_id == Product.id)
        .join(Order, OrderItem.order_id == Order.id)
        .filter(*base_filter)
        .group_by(Product.id, Product.name)
        .order_by(func.sum(OrderItem.total_price).desc())
        .limit(10)
        .all()
    )

    return {
        "sales_data": [
            {"date": row.day, "sales": Decimal(row.total_sales or 0), "orders": row.order_count}
            for row in daily
        ],
        "top_products": [
            {"name": row.name, "quantity": int(row.quantity or 0), "revenue": Decimal(row.revenue or 0)}
            for row in top_products
        ],
    }


def financial_summary(db: Session, start_date: date | None = None, end_date: date | None = None) -> dict:
    revenue_query = db.query(func.coalesce(func.sum(Order.total_amount), 0)).filter(Order.status == "completed")
    expenses_query = (
        db.query(func.coalesce(func.sum(Expense.amount), 0))
        .filter(Expense.category.notin_(ACCOUNT_HISTORY_CATEGORIES))
    )
    purchases_query = db.query(func.coalesce(func.sum(Purchase.total_amount), 0))

    if start_date and end_date:
        start_dt, end_dt = _day_bounds(start_date, end_date)
        revenue_query = revenue_query.filter(Order.order_date.between(start_dt, end_dt))
        expenses_query = expenses_query.filter(Expense.date.between(start_dt, end_dt))
        purchases_query = purchases_query.filter(Purchase.purchase_date.between(start_dt, end_dt))

    total_revenue = Decimal(revenue_query.scalar() or 0)
    total_expenses = Decimal(expenses_query.scalar() or 0)
    total_purchases = Decimal(purchases_query.scalar() or 0)

    outstanding_receivables = Decimal(
        db.query(func.coalesce(func.sum(Customer.balance), 0))
        .filter(Customer.balance > 0)
        .scalar() or 0
    )

    outstanding_payables = Decimal(
        db.query(func.coalesce(func.sum(Party.balance), 0))
        .filter(Party.balance > 0)
        .scalar() or 0
    )

    return {
        "total_revenue": total_revenue,
        "total_expenses": total_expenses,
        "total_purchases": total_purchases,
        "net_profit": total_revenue - total_expenses - total_purchases,
        "outstanding_receivables": outstanding_receivables,
        "outstanding_payables": outstanding_payables,
    }
