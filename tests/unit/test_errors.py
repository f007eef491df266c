"""Tests for xp_common.errors and xp_common.response."""

from src.xp_common.errors import (
    AppError,
    AuthorizationError,
    ConcurrencyConflictError,
    ExpiredOfferError,
    InsufficientBalanceError,
    OfferNotActiveError,
    OfferNotFoundError,
    RateUnavailableError,
    SelfTradeError,
    ValidationError,
    WalletNotFoundError,
)
from src.xp_common.response import ApiResponse, error_response, success_response


class TestAppError:
    def test_base_error(self) -> None:
        err = AppError(code=9002, message="Internal error")
        assert err.code == 9002
        assert err.message == "Internal error"
        assert err.http_status == 500
        assert err.retryable is False

    def test_is_exception(self) -> None:
        assert isinstance(AppError(code=1001, message="test"), Exception)


class TestSpecificErrors:
    def test_validation_error_names_field(self) -> None:
        err = ValidationError("amount", "must be positive, got 0")
        assert err.code == 1001
        assert err.http_status == 422
        assert err.field == "amount"
        assert "amount" in err.message

    def test_insufficient_balance(self) -> None:
        err = InsufficientBalanceError("QANTAS", required=12000, available=3000)
        assert err.code == 2001
        assert err.http_status == 422
        assert "12000" in err.message
        assert "3000" in err.message
        assert err.program == "QANTAS"

    def test_wallet_not_found(self) -> None:
        err = WalletNotFoundError("GYG")
        assert err.code == 2002
        assert err.http_status == 404

    def test_rate_unavailable_carries_reason(self) -> None:
        err = RateUnavailableError("QANTAS", "DELTA", "rate is stale")
        assert err.code == 3001
        assert err.reason == "rate is stale"
        assert "stale" in err.message

    def test_offer_errors(self) -> None:
        assert OfferNotFoundError("to_1").http_status == 404
        assert OfferNotActiveError("to_1").http_status == 409
        assert ExpiredOfferError("to_1").http_status == 410
        assert SelfTradeError().code == 5004

    def test_authorization_error(self) -> None:
        err = AuthorizationError("Only the offer creator can cancel it")
        assert err.code == 1003
        assert err.http_status == 403

    def test_concurrency_conflict_is_retryable(self) -> None:
        err = ConcurrencyConflictError()
        assert err.retryable is True
        assert err.http_status == 409


class TestApiResponse:
    def test_success_response(self) -> None:
        resp = success_response({"id": "cv_1"})
        assert resp.code == 0
        assert resp.message == "success"
        assert resp.data == {"id": "cv_1"}
        assert resp.request_id.startswith("req_")

    def test_error_response(self) -> None:
        resp = error_response(2001, "Insufficient balance")
        assert resp.code == 2001
        assert resp.data is None

    def test_model_dump_has_all_fields(self) -> None:
        dumped = ApiResponse().model_dump()
        assert set(dumped) == {"code", "message", "data", "timestamp", "request_id"}
