# src/registry_reports/adapters/routers/reports_router.py
# Copyright (c) Registry Reports.
# SPDX-License-Identifier: MIT
"""Registry reports HTTP router (v1).

Purpose:
    Expose the report engine:
        - POST /v1/reports/aggregate
        - GET  /v1/reports/periods
        - GET  /v1/reports/dimensions

Layer:
    adapters/routers

Notes:
    Domain errors (granularity, date range, dimension) are mapped to 400
    error envelopes here; FastAPI validation failures stay 422.
"""

from __future__ import annotations

from datetime import date
from typing import Any, cast

from fastapi import Body, Depends, Query, Request, Response
from fastapi.responses import JSONResponse

from registry_reports.adapters.controllers.reports_controller import ReportsController
from registry_reports.adapters.presenters.reports_presenter import ReportsPresenter
from registry_reports.adapters.routers.base_router import BaseRouter
from registry_reports.adapters.schemas.http.envelopes import (
    ErrorEnvelope,
    SuccessEnvelope,
)
from registry_reports.adapters.schemas.http.reports import (
    AggregateRequestHTTP,
    DimensionCatalogHTTP,
    RegistryReportHTTP,
    ReportPeriodsPageHTTP,
)
from registry_reports.application.schemas.dto.reports import ReportPageQueryDTO, ReportQueryDTO
from registry_reports.config.settings import Settings
from registry_reports.dependencies.reports import get_reports_controller, get_settings
from registry_reports.domain.enums.registry import AnchorField, FormCategory
from registry_reports.domain.exceptions.base import DomainError
from registry_reports.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)

router = BaseRouter(version="v1", resource="reports", tags=["Reports"])
presenter = ReportsPresenter()

# ---------------------------------------------------------------------------
# FastAPI dependency / parameter singletons
# (Ruff B008: avoid Query()/Body() calls in argument defaults)
# ---------------------------------------------------------------------------

_CONTROLLER_DEP = Depends(get_reports_controller)
_SETTINGS_DEP = Depends(get_settings)

_AGGREGATE_BODY: Any = Body(...)

_Q_GRANULARITY: Any = Query(
    default="yearly", description="daily | weekly | monthly | quarterly | yearly"
)
_Q_START: Any = Query(default=None, description="Inclusive start date (requires end_date).")
_Q_END: Any = Query(default=None, description="Inclusive end date (requires start_date).")
_Q_CLASSIFICATION: Any = Query(
    default="all",
    pattern="^(all|birth|death|marriage)$",
    description="Form category filter.",
)
_Q_DIMENSIONS: Any = Query(
    default=None,
    description="Dimension names; repeat the parameter or separate with commas.",
)
_Q_ANCHOR: Any = Query(default=AnchorField.REGISTERED_AT, description="Bucketing timestamp.")
_Q_PERCENTAGES: Any = Query(default=False, description="Attach percentages.")
_Q_PAGE: Any = Query(default=None, ge=1, description="1-based page index.")
_Q_PAGE_SIZE: Any = Query(default=None, ge=1, description="Periods per page (capped at 200).")


def _trace_id(request: Request) -> str | None:
    """Return the request correlation id (X-Request-ID), if present."""
    return getattr(request.state, "request_id", None) or request.headers.get("X-Request-ID")


def _error_response(
    *,
    http_status: int,
    code: str,
    message: str,
    trace_id: str | None,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    """Build a standard error envelope response."""
    result = presenter.present_error(
        code=code,
        http_status=http_status,
        message=message,
        trace_id=trace_id,
        details=details,
    )
    body = cast(ErrorEnvelope, result.body)
    return JSONResponse(
        status_code=result.status_code or http_status,
        content=body.model_dump_http(),
        headers=dict(result.headers),
    )


def _domain_error(exc: DomainError, trace_id: str | None) -> JSONResponse:
    logger.info(
        "reports.api.domain_error",
        extra={"extra": {"code": exc.code, "trace_id": trace_id}},
    )
    return _error_response(
        http_status=400,
        code=exc.code,
        message=str(exc) or exc.code,
        trace_id=trace_id,
        details=exc.details,
    )


def _split_dimensions(raw: list[str] | None) -> tuple[str, ...]:
    if not raw:
        return ("category",)
    names = [part.strip() for item in raw for part in item.split(",")]
    return tuple(n for n in names if n) or ("category",)


@router.post(
    "/aggregate",
    summary="Aggregate supplied facts into a period report",
    description=(
        "Bucket the supplied registry facts into gapless, chronologically "
        "sorted periods and count them per requested dimension."
    ),
    response_model=cast(Any, SuccessEnvelope[RegistryReportHTTP]),
    responses=cast("dict[int | str, dict[str, Any]]", BaseRouter.std_error_responses()),
)
async def aggregate_report(
    request: Request,
    response: Response,
    body: AggregateRequestHTTP = _AGGREGATE_BODY,
    controller: ReportsController = _CONTROLLER_DEP,
    settings: Settings = _SETTINGS_DEP,
) -> Any:
    """Aggregate the facts in the request body."""
    trace_id = _trace_id(request)
    if len(body.facts) > settings.report_max_facts:
        return _error_response(
            http_status=413,
            code="FACT_LIMIT_EXCEEDED",
            message="Too many facts in one request.",
            trace_id=trace_id,
            details={"limit": settings.report_max_facts, "received": len(body.facts)},
        )

    try:
        dto = await controller.aggregate(body)
    except DomainError as exc:
        return _domain_error(exc, trace_id)

    return BaseRouter.send_success(response, presenter.present_report(dto, trace_id=trace_id))


@router.get(
    "/periods",
    summary="Paginated period report over stored facts",
    response_model=ReportPeriodsPageHTTP,
    responses=cast("dict[int | str, dict[str, Any]]", BaseRouter.std_error_responses()),
)
async def list_report_periods(
    request: Request,
    response: Response,
    granularity: str = _Q_GRANULARITY,
    start_date: date | None = _Q_START,
    end_date: date | None = _Q_END,
    classification: str = _Q_CLASSIFICATION,
    dimensions: list[str] | None = _Q_DIMENSIONS,
    anchor: AnchorField = _Q_ANCHOR,
    include_percentages: bool = _Q_PERCENTAGES,
    page: int | None = _Q_PAGE,
    page_size: int | None = _Q_PAGE_SIZE,
    controller: ReportsController = _CONTROLLER_DEP,
    settings: Settings = _SETTINGS_DEP,
) -> Any:
    """Return one page of the report built from the stored facts."""
    trace_id = _trace_id(request)
    params = BaseRouter.resolve_page(
        page, page_size, default_page_size=settings.report_default_page_size
    )
    categories = None if classification == "all" else (FormCategory.parse(classification),)

    try:
        dto = await controller.periods(
            ReportPageQueryDTO(
                query=ReportQueryDTO(
                    granularity=granularity,
                    dimensions=_split_dimensions(dimensions),
                    categories=categories,
                    start_date=start_date,
                    end_date=end_date,
                    anchor=anchor,
                    include_percentages=include_percentages,
                ),
                page=params.page,
                page_size=params.page_size,
            )
        )
    except DomainError as exc:
        return _domain_error(exc, trace_id)

    return BaseRouter.send_success(response, presenter.present_page(dto, trace_id=trace_id))


@router.get(
    "/dimensions",
    summary="Dimension catalog",
    description="Dimension names and the category keys each produces with the loaded vocabularies.",
    response_model=cast(Any, SuccessEnvelope[DimensionCatalogHTTP]),
    responses=cast("dict[int | str, dict[str, Any]]", BaseRouter.std_error_responses()),
)
async def list_report_dimensions(
    request: Request,
    response: Response,
    controller: ReportsController = _CONTROLLER_DEP,
) -> Any:
    """Return every dimension with its category keys."""
    dto = await controller.dimensions()
    return BaseRouter.send_success(
        response, presenter.present_dimensions(dto, trace_id=_trace_id(request))
    )
