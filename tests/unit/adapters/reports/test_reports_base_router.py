# tests/unit/adapters/reports/test_reports_base_router.py
from __future__ import annotations

from fastapi import Response

from registry_reports.adapters.routers.base_router import BaseRouter, PageParams
from registry_reports.adapters.schemas.http.envelopes import SuccessEnvelope


def test_send_success_applies_headers_and_returns_mapping_copy() -> None:
    result = type(
        "PR", (), {"body": {"status": "ok"}, "headers": {"X-Request-ID": "r-1", "ETag": '"abc123"'}}
    )()
    resp = Response()
    out = BaseRouter.send_success(resp, result)
    assert resp.headers.get("X-Request-ID") == "r-1"
    assert resp.headers.get("ETag") == '"abc123"'
    assert out == {"status": "ok"}
    assert out is not result.body


def test_send_success_returns_model_instance_unchanged_when_no_response() -> None:
    env = SuccessEnvelope[dict[str, str]](data={"k": "v"})
    result = type("PR", (), {"body": env, "headers": {}})()
    assert BaseRouter.send_success(None, result) is env


def test_send_success_none_body() -> None:
    result = type("PR", (), {"body": None, "headers": {}})()
    assert BaseRouter.send_success(None, result) == {}


def test_resolve_page_defaults_and_clamps() -> None:
    assert BaseRouter.resolve_page(None, None) == PageParams(page=1, page_size=20)
    assert BaseRouter.resolve_page(None, None, default_page_size=50).page_size == 50
    assert BaseRouter.resolve_page(3, 10_000).page_size == BaseRouter.MAX_PAGE_SIZE
    assert BaseRouter.resolve_page(0, 0) == PageParams(page=1, page_size=1)


def test_page_params_offset() -> None:
    params = PageParams(page=3, page_size=25)
    assert params.offset == 50
    assert params.limit == 25


def test_router_prefix_from_version_and_resource() -> None:
    router = BaseRouter(version="v1", resource="things", tags=["Things"])
    assert router.prefix == "/v1/things"
    assert router.tags == ["Things"]
