# =========================================================
# DASHBOARD & ANALYTICS ROUTERS
#
# Read-only. Revenue figures only count completed orders.
# =========================================================

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from bakery.database import get_db
from bakery.core.auth import get_current_user
from bakery.schemas.inventory import LowStockItemResponse
from bakery.schemas.order import OrderResponse
from bakery.schemas.report import (
    DashboardStatsResponse,
    FinancialSummaryResponse,
    SalesAnalyticsResponse,
)
from bakery.services import analytics, ledger

dashboard_router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])
analytics_router = APIRouter(prefix="/api/analytics", tags=["Analytics"])


def _validate_range(start_date: Optional[date], end_date: Optional[date]):
    if start_date and end_date and start_date > end_date:
        raise HTTPException(status_code=400, detail="start_date cannot be after end_date")


# =========================================================
# DASHBOARD
# =========================================================
@dashboard_router.get("/stats", response_model=DashboardStatsResponse)
def dashboard_stats(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
    day: Optional[date] = Query(None, alias="date"),
):
    return analytics.dashboard_stats(db, day or date.today())


@dashboard_router.get("/recent-orders", response_model=list[OrderResponse])
def recent_orders(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
    limit: int = Query(10, ge=1, le=50),
):
    return analytics.recent_orders(db, limit)


@dashboard_router.get("/low-stock", response_model=list[LowStockItemResponse])
def dashboard_low_stock(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return ledger.get_low_stock_items(db)


# =========================================================
# ANALYTICS
# =========================================================
@analytics_router.get("/sales", response_model=SalesAnalyticsResponse)
def sales_analytics(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
):
    _validate_range(start_date, end_date)
    return analytics.sales_analytics(db, start_date, end_date)


@analytics_router.get("/financial-summary", response_model=FinancialSummaryResponse)
def financial_summary(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
):
    _validate_range(start_date, end_date)
    return analytics.financial_summary(db, start_date, end_date)
