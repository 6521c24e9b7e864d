"""Tests for sm_common.errors and sm_common.response."""

from src.sm_common.errors import (
    AmountMismatchError,
    AppError,
    ConversationNotFoundError,
    ForbiddenError,
    InsufficientBalanceError,
    InvalidCredentialsError,
    ListingNotActiveError,
    ListingNotFoundError,
    MissingSettlementError,
    PhoneExistsError,
    SelfConversationError,
    UserNotFoundError,
)
from src.sm_common.response import ApiResponse, error_response, success_response


class TestAppError:
    def test_base_error(self) -> None:
        err = AppError(code=9002, message="Internal error")
        assert err.code == 9002
        assert err.message == "Internal error"
        assert err.http_status == 500

    def test_custom_http_status(self) -> None:
        err = AppError(code=1001, message="Phone taken", http_status=409)
        assert err.http_status == 409

    def test_is_exception(self) -> None:
        assert isinstance(AppError(code=1001, message="test"), Exception)


class TestSpecificErrors:
    def test_phone_exists(self) -> None:
        err = PhoneExistsError("+22990000001")
        assert (err.code, err.http_status) == (1001, 409)
        assert "+22990000001" in err.message

    def test_invalid_credentials(self) -> None:
        assert InvalidCredentialsError().http_status == 401

    def test_user_not_found_is_distinct_from_invalid_credentials(self) -> None:
        err = UserNotFoundError("+22990000009")
        assert (err.code, err.http_status) == (1004, 404)
        assert not isinstance(err, InvalidCredentialsError)

    def test_insufficient_balance(self) -> None:
        err = InsufficientBalanceError(required=900, available=300)
        assert (err.code, err.http_status) == (2001, 422)
        assert "900" in err.message
        assert "300" in err.message

    def test_listing_errors(self) -> None:
        assert ListingNotFoundError("SRV_1").http_status == 404
        err = ListingNotActiveError("SRV_1", "completed")
        assert err.code == 3002
        assert "completed" in err.message

    def test_transaction_errors(self) -> None:
        assert MissingSettlementError("SRV_1").code == 4002
        err = AmountMismatchError(500, 1000)
        assert (err.code, err.http_status) == (4005, 422)

    def test_conversation_errors(self) -> None:
        assert ConversationNotFoundError("CONV_1").http_status == 404
        assert SelfConversationError().code == 5003

    def test_forbidden(self) -> None:
        err = ForbiddenError()
        assert (err.code, err.http_status) == (9003, 403)


class TestApiResponse:
    def test_success_response(self) -> None:
        resp = success_response({"id": "SRV_1"})
        assert resp.success is True
        assert resp.code == 0
        assert resp.message == "success"
        assert resp.data == {"id": "SRV_1"}

    def test_error_response(self) -> None:
        resp = error_response(4003, "Invalid confirmation code")
        assert resp.success is False
        assert resp.code == 4003
        assert resp.data is None

    def test_request_id_and_timestamp_are_filled(self) -> None:
        resp = ApiResponse()
        assert resp.request_id.startswith("req_")
        assert resp.timestamp

    def test_serializes_to_json_dict(self) -> None:
        dumped = success_response([1, 2]).model_dump()
        assert set(dumped) == {"success", "code", "message", "data", "timestamp", "request_id"}
