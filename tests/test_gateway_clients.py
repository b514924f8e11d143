from decimal import Decimal
from unittest.mock import patch

import pytest
import requests

from app.domain.errors import GatewayConnectivityError, NotificationError
from app.domain.schemas import NotificationRequest, PaymentRequest
from app.services.notification_client import NotificationClient
from app.services.payment_client import PaymentClient
from app.services.product_client import ProductClient
from app.services.user_client import UserClient

from tests.fakes import make_response


# =====================================================
# product-service
# =====================================================
def test_fetch_product():
    client = ProductClient(base_url="http://catalog/", timeout=1.5)
    with patch("app.services.product_client.requests.get") as get:
        get.return_value = make_response(200, {"id": 7, "name": "Widget", "price": 19.99, "stock": 3})
        product = client.fetch_product(7)

    get.assert_called_once_with("http://catalog/products/7", timeout=1.5)
    assert product.name == "Widget"
    assert product.price == Decimal("19.99")


def test_fetch_missing_product_returns_none():
    with patch("app.services.product_client.requests.get") as get:
        get.return_value = make_response(404, {"detail": "Product not found"})
        assert ProductClient(base_url="http://catalog").fetch_product(7) is None
    assert get.call_count == 1


def test_product_connection_errors_are_retried_then_raised():
    with patch("app.services.product_client.requests.get") as get:
        get.side_effect = requests.ConnectionError("refused")
        with pytest.raises(GatewayConnectivityError) as exc:
            ProductClient(base_url="http://catalog").fetch_product(7)

    assert get.call_count == 3
    assert exc.value.service == "product-service"


def test_product_server_error_recovers_on_retry():
    with patch("app.services.product_client.requests.get") as get:
        get.side_effect = [
            make_response(503),
            make_response(200, {"id": 7, "name": "Widget", "price": "19.99"}),
        ]
        product = ProductClient(base_url="http://catalog").fetch_product(7)

    assert product.id == 7
    assert get.call_count == 2


def test_product_client_error_is_not_retried():
    with patch("app.services.product_client.requests.get") as get:
        get.return_value = make_response(400)
        with pytest.raises(GatewayConnectivityError):
            ProductClient(base_url="http://catalog").fetch_product(7)
    assert get.call_count == 1


def test_unreadable_product_body_is_connectivity_failure():
    with patch("app.services.product_client.requests.get") as get:
        get.return_value = make_response(200, b"<html>")
        with pytest.raises(GatewayConnectivityError) as exc:
            ProductClient(base_url="http://catalog").fetch_product(7)

    assert exc.value.service == "product-service"
    assert get.call_count == 1


# =====================================================
# user-service
# =====================================================
def test_fetch_user():
    payload = {"id": 1, "username": "jdoe", "email": "jdoe@example.com", "fullName": "John Doe"}
    with patch("app.services.user_client.requests.get") as get:
        get.return_value = make_response(200, payload)
        user = UserClient(base_url="http://users").fetch_user(1)

    assert user.email == "jdoe@example.com"
    assert user.display_name == "John Doe"


def test_display_name_falls_back_to_username():
    payload = {"id": 1, "username": "jdoe", "email": "jdoe@example.com", "fullName": None}
    with patch("app.services.user_client.requests.get") as get:
        get.return_value = make_response(200, payload)
        assert UserClient(base_url="http://users").fetch_user(1).display_name == "jdoe"


def test_fetch_missing_user_returns_none():
    with patch("app.services.user_client.requests.get") as get:
        get.return_value = make_response(404)
        assert UserClient(base_url="http://users").fetch_user(1) is None


def test_user_timeout_is_connectivity_failure():
    with patch("app.services.user_client.requests.get") as get:
        get.side_effect = requests.Timeout("read timed out")
        with pytest.raises(GatewayConnectivityError):
            UserClient(base_url="http://users").fetch_user(1)
    assert get.call_count == 3


def test_incomplete_user_body_is_connectivity_failure():
    with patch("app.services.user_client.requests.get") as get:
        get.return_value = make_response(200, {"id": 1})
        with pytest.raises(GatewayConnectivityError) as exc:
            UserClient(base_url="http://users").fetch_user(1)

    assert exc.value.service == "user-service"


# =====================================================
# payment-service
# =====================================================
def _payment_request():
    return PaymentRequest(order_id="12", amount=Decimal("39.98"), payment_method_details="Credit Card")


def test_process_payment():
    body = {
        "id": 5,
        "orderId": "12",
        "amount": 39.98,
        "paymentMethod": "Credit Card",
        "paymentStatus": "COMPLETED",
        "transactionId": "tx-1",
        "transactionTimestamp": "2026-10-19T10:00:00",
    }
    with patch("app.services.payment_client.requests.post") as post:
        post.return_value = make_response(200, body)
        outcome = PaymentClient(base_url="http://payments", timeout=3).process_payment(_payment_request())

    post.assert_called_once_with(
        "http://payments/payments/process",
        json={"orderId": "12", "amount": 39.98, "paymentMethodDetails": "Credit Card"},
        headers={"Idempotency-Key": "order-12"},
        timeout=3,
    )
    assert outcome.payment_status == "COMPLETED"
    assert outcome.transaction_id == "tx-1"
    assert outcome.is_completed


@pytest.mark.parametrize("status", [400, 402, 422])
def test_declined_payment_returns_none(status):
    with patch("app.services.payment_client.requests.post") as post:
        post.return_value = make_response(status, {"error": "declined"})
        assert PaymentClient(base_url="http://payments").process_payment(_payment_request()) is None


def test_empty_payment_body_returns_none():
    with patch("app.services.payment_client.requests.post") as post:
        post.return_value = make_response(200)
        assert PaymentClient(base_url="http://payments").process_payment(_payment_request()) is None


@pytest.mark.parametrize("side_effect", [requests.ConnectionError("refused"), requests.Timeout("slow")])
def test_unreachable_payment_raises_without_retry(side_effect):
    with patch("app.services.payment_client.requests.post") as post:
        post.side_effect = side_effect
        with pytest.raises(GatewayConnectivityError):
            PaymentClient(base_url="http://payments").process_payment(_payment_request())
    assert post.call_count == 1


def test_payment_server_error_raises():
    with patch("app.services.payment_client.requests.post") as post:
        post.return_value = make_response(500)
        with pytest.raises(GatewayConnectivityError):
            PaymentClient(base_url="http://payments").process_payment(_payment_request())


@pytest.mark.parametrize(
    "body",
    [
        {"transactionId": "t"},
        {"paymentStatus": "X" * 40, "transactionId": "t"},
        b"<html>",
    ],
)
def test_unreadable_payment_body_is_connectivity_failure(body):
    with patch("app.services.payment_client.requests.post") as post:
        post.return_value = make_response(200, body)
        with pytest.raises(GatewayConnectivityError) as exc:
            PaymentClient(base_url="http://payments").process_payment(_payment_request())

    assert exc.value.service == "payment-service"


def test_get_payment_status():
    body = {"orderId": "12", "paymentStatus": "COMPLETED", "transactionId": "tx-1"}
    with patch("app.services.payment_client.requests.get") as get:
        get.return_value = make_response(200, body)
        outcome = PaymentClient(base_url="http://payments", timeout=3).get_payment_status("12")

    get.assert_called_once_with("http://payments/payments/status/order/12", timeout=3)
    assert outcome.payment_status == "COMPLETED"
    assert outcome.transaction_id == "tx-1"


def test_missing_payment_status_returns_none():
    with patch("app.services.payment_client.requests.get") as get:
        get.return_value = make_response(404)
        assert PaymentClient(base_url="http://payments").get_payment_status("12") is None
    assert get.call_count == 1


def test_payment_status_lookup_is_retried_then_raised():
    with patch("app.services.payment_client.requests.get") as get:
        get.side_effect = requests.ConnectionError("refused")
        with pytest.raises(GatewayConnectivityError):
            PaymentClient(base_url="http://payments").get_payment_status("12")
    assert get.call_count == 3


# =====================================================
# notification-service
# =====================================================
def _email():
    return NotificationRequest(
        recipient_email="jdoe@example.com",
        subject="Order Confirmation #12",
        body="Thanks",
        kind="ORDER_CONFIRMATION",
    )


def test_send_email():
    with patch("app.services.notification_client.requests.post") as post:
        post.return_value = make_response(200, {"status": "queued"})
        assert NotificationClient(base_url="http://notify").send_email(_email()) is True

    _, kwargs = post.call_args
    assert kwargs["json"] == {
        "recipientEmail": "jdoe@example.com",
        "subject": "Order Confirmation #12",
        "body": "Thanks",
        "kind": "ORDER_CONFIRMATION",
    }


def test_rejected_email_returns_false():
    with patch("app.services.notification_client.requests.post") as post:
        post.return_value = make_response(400)
        assert NotificationClient(base_url="http://notify").send_email(_email()) is False


def test_unreachable_notification_raises():
    with patch("app.services.notification_client.requests.post") as post:
        post.side_effect = requests.ConnectionError("refused")
        with pytest.raises(NotificationError):
            NotificationClient(base_url="http://notify").send_email(_email())
