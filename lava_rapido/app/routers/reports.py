"""Router exposing revenue, expense and commission summaries."""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import schemas
from ..clock import Clock, get_clock
from ..database import get_db
from ..errors import LavaRapidoError
from ..security import MemberIdentity, get_current_member
from ..services import BusinessService, ReportService
from .errors import database_error, http_error

router = APIRouter()


@router.get("/current-month", response_model=schemas.MonthlyReport)
def current_month_report(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    member: MemberIdentity = Depends(get_current_member),
) -> schemas.MonthlyReport:
    try:
        business = BusinessService.get_business(db, member.business_id)
        return ReportService.current_month_summary(
            db,
            member.business_id,
            clock.today(),
            BusinessService.financial_settings(business),
        )
    except LavaRapidoError as exc:
        raise http_error(exc) from exc
    except SQLAlchemyError as exc:
        raise database_error(db, exc, "computing the monthly report") from exc


@router.get("/summary", response_model=schemas.MonthlyReport)
def range_report(
    start_date: Optional[date] = Query(None, description="First day of the range"),
    end_date: Optional[date] = Query(None, description="Last day of the range"),
    db: Session = Depends(get_db),
    member: MemberIdentity = Depends(get_current_member),
) -> schemas.MonthlyReport:
    try:
        business = BusinessService.get_business(db, member.business_id)
        return ReportService.compute_summary(
            db,
            member.business_id,
            start_date,
            end_date,
            BusinessService.financial_settings(business),
        )
    except LavaRapidoError as exc:
        raise http_error(exc) from exc
    except SQLAlchemyError as exc:
        raise database_error(db, exc, "computing a report") from exc


@router.get("/history", response_model=schemas.HistoryResponse)
def history_report(
    start_date: Optional[date] = Query(None, description="First day of the range"),
    end_date: Optional[date] = Query(None, description="Last day of the range"),
    db: Session = Depends(get_db),
    member: MemberIdentity = Depends(get_current_member),
) -> schemas.HistoryResponse:
    """Summary of the range plus the services and paid expenses behind it."""

    try:
        business = BusinessService.get_business(db, member.business_id)
        return ReportService.history(
            db,
            member.business_id,
            start_date,
            end_date,
            BusinessService.financial_settings(business),
        )
    except LavaRapidoError as exc:
        raise http_error(exc) from exc
    except SQLAlchemyError as exc:
        raise database_error(db, exc, "loading the history") from exc
