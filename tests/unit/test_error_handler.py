"""Unit tests for API error handling."""

from uuid import uuid4

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from learnguard.api.middleware.error_handler import (
    APIError,
    NotFoundError,
    domain_status,
    setup_exception_handlers,
)
from learnguard.api.middleware.logging import (
    RequestLoggingMiddleware,
    request_log_context,
    resolve_request_id,
)
from learnguard.shared.exceptions import (
    AlertNotFoundError,
    FeatureDisabledError,
    FeedbackAlreadyRecordedError,
    InvalidRatingError,
    InvalidRiskModelError,
    InvalidTimeRangeError,
    InvalidTransitionError,
    LearnGuardException,
    StatsProviderError,
)


class TestDomainStatus:
    """Tests for exception family to HTTP status mapping."""

    @pytest.mark.parametrize(
        "exc, expected",
        [
            (AlertNotFoundError(uuid4()), (404, "NOT_FOUND")),
            (InvalidTransitionError(uuid4(), "planned", "completed"), (409, "CONFLICT")),
            (FeedbackAlreadyRecordedError(uuid4()), (409, "CONFLICT")),
            (InvalidRatingError("rating", 9), (400, "VALIDATION_ERROR")),
            (InvalidTimeRangeError("2026-03-02", "2026-03-01"), (400, "VALIDATION_ERROR")),
            (FeatureDisabledError("enable_auto_execution"), (403, "FEATURE_DISABLED")),
            (StatsProviderError("timeout"), (503, "SERVICE_UNAVAILABLE")),
            (InvalidRiskModelError("memory_decay", "weights"), (500, "CONFIGURATION_ERROR")),
            (LearnGuardException("unclassified"), (500, "DOMAIN_ERROR")),
        ],
    )
    def test_mapping(self, exc, expected):
        assert domain_status(exc) == expected

    def test_exception_to_dict(self):
        execution_id = uuid4()
        data = FeedbackAlreadyRecordedError(execution_id).to_dict()

        assert data["error"] == "FeedbackAlreadyRecordedError"
        assert data["details"] == {"execution_id": str(execution_id)}

    def test_feature_disabled_names_env_var(self):
        exc = FeatureDisabledError("enable_auto_execution")
        assert "FF_ENABLE_AUTO_EXECUTION=true" in exc.message


class TestRequestLogging:
    """Tests for request id handling."""

    def test_well_formed_id_is_kept(self):
        assert resolve_request_id("abc-123_x") == "abc-123_x"

    @pytest.mark.parametrize("value", [None, "", "has space", "x" * 65])
    def test_other_ids_are_replaced(self, value):
        assert resolve_request_id(value) != value

    def test_learner_id_in_context(self):
        user_id = uuid4()
        request = type("R", (), {})()
        request.method = "GET"
        request.url = type("U", (), {"path": f"/users/{user_id}/risks"})()

        context = request_log_context(request, "req-1")

        assert context["user_id"] == str(user_id)
        assert context["request_id"] == "req-1"


class TestHandlers:
    """Tests for the registered exception handlers."""

    @pytest.fixture
    def client(self):
        app = FastAPI()
        setup_exception_handlers(app)
        app.add_middleware(RequestLoggingMiddleware)

        @app.get("/disabled")
        async def disabled():
            raise FeatureDisabledError("enable_auto_execution")

        @app.get("/provider")
        async def provider():
            raise StatsProviderError("aggregator offline")

        @app.get("/missing")
        async def missing():
            raise NotFoundError("LearningProfile", "abc")

        @app.get("/teapot")
        async def teapot():
            raise APIError("short and stout", error_code="TEAPOT", status_code=418)

        @app.get("/bad-value")
        async def bad_value():
            raise ValueError("completed_actions (5) exceeds total_actions (2)")

        @app.get("/crash")
        async def crash():
            raise RuntimeError("boom")

        return TestClient(app, raise_server_exceptions=False)

    def test_feature_disabled(self, client):
        response = client.get("/disabled")

        assert response.status_code == 403
        body = response.json()
        assert body["error"]["code"] == "FEATURE_DISABLED"
        assert body["error"]["details"] == {"flag": "enable_auto_execution"}
        assert body["request_id"] == response.headers["X-Request-ID"]

    def test_external_service(self, client):
        response = client.get("/provider")

        assert response.status_code == 503
        assert response.json()["error"]["details"] == {"service": "StatsProvider"}

    def test_api_not_found(self, client):
        body = client.get("/missing").json()

        assert body["error"]["code"] == "NOT_FOUND"
        assert body["error"]["message"] == "LearningProfile for 'abc' not found"

    def test_custom_api_error(self, client):
        response = client.get("/teapot")

        assert response.status_code == 418
        assert response.json()["error"]["code"] == "TEAPOT"

    def test_value_error(self, client):
        response = client.get("/bad-value")

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "BAD_REQUEST"

    def test_unexpected_error(self, client):
        response = client.get("/crash")

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "INTERNAL_ERROR"
