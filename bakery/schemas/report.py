# schemas/report.py

import datetime as dt
from typing import List

from bakery.schemas.common import CamelModel


class DashboardStatsResponse(CamelModel):
    today_sales: float
    today_orders: int
    products_in_stock: int
    low_stock_items: int
    production_today: int


class SalesDayResponse(CamelModel):
    date: dt.date
    sales: float
    orders: int


class TopProductResponse(CamelModel):
    name: str
    quantity: int
    revenue: float


class SalesAnalyticsResponse(CamelModel):
    sales_data: List[SalesDayResponse]
    top_products: List[TopProductResponse]


class FinancialSummaryResponse(CamelModel):
    total_revenue: float
    total_expenses: float
    total_purchases: float
    net_profit: float
    outstanding_receivables: float
    outstanding_payables: float
