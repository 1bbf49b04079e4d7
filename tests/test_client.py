import io

import pytest
import requests

from admin_api.client import AdminApiClient
from admin_api.errors import ApiConnectionError, ApiError
from admin_api.session import AdminSession

from tests.conftest import BASE_URL, FakeHttp


def test_json_request_sends_bearer_token_and_content_type(client, http):
    client.get_users(page=1, limit=10)
    headers = http.calls[0]["headers"]
    assert headers["Authorization"] == "Bearer test-token"
    assert headers["Content-Type"] == "application/json"
    assert http.calls[0]["timeout"] == 5


def test_no_token_means_no_authorization_header(http):
    client = AdminApiClient(AdminSession(), BASE_URL, http=http)
    client.get_users()
    assert "Authorization" not in http.calls[0]["headers"]


def test_multipart_upload_omits_content_type(client, http):
    client.upload_qr_code("qr.png", io.BytesIO(b"png"), "image/png")
    call = http.calls[0]
    assert "Content-Type" not in call["headers"]
    assert call["files"]["qrCode"][0] == "qr.png"
    assert call["json"] is None


def test_banner_create_is_multipart_even_without_image(client, http):
    client.create_banner({"title": "Launch"})
    call = http.calls[0]
    assert "Content-Type" not in call["headers"]
    assert call["data"] == {"title": "Launch"}


def test_query_string_drops_none_and_empty(client, http):
    client.get_users(page=2, limit=10, search="", status=None, kycStatus="pending")
    assert http.calls[0]["params"] == {"page": 2, "limit": 10, "kycStatus": "pending"}


def test_success_false_raises_with_server_message(client, http):
    http.routes[("PUT", "/kyc/k1/approve")] = {"success": False, "message": "KYC already processed"}
    with pytest.raises(ApiError) as excinfo:
        client.approve_kyc("k1")
    assert str(excinfo.value) == "KYC already processed"


def test_http_error_without_message_uses_fallback(client, http):
    http.routes[("GET", "/users/stats")] = ({}, 500)
    with pytest.raises(ApiError) as excinfo:
        client.get_user_stats()
    assert str(excinfo.value) == "Failed to get user stats"
    assert excinfo.value.status_code == 500


def test_unauthorized_is_flagged(client, http):
    http.routes[("GET", "/auth/me")] = ({"success": False, "message": "Token expired"}, 401)
    with pytest.raises(ApiError) as excinfo:
        client.get_me()
    assert excinfo.value.is_unauthorized


def test_non_json_body_is_a_failure(client, http):
    http.routes[("GET", "/dashboard/health")] = (ValueError("not json"), 502)
    with pytest.raises(ApiError):
        client.get_system_health()


def test_transport_failure_becomes_connection_error(client, http):
    http.routes[("GET", "/users")] = requests.ConnectionError("refused")
    with pytest.raises(ApiConnectionError):
        client.get_users()


def test_login_stores_token_on_the_session(http):
    http.routes[("POST", "/auth/login")] = {"success": True, "data": {"token": "abc", "admin": {"email": "a@b.co"}}}
    session = AdminSession()
    client = AdminApiClient(session, BASE_URL, http=http)
    client.login("a@b.co", "pw")
    assert session.token == "abc"

    client.get_me()
    assert http.calls[-1]["headers"]["Authorization"] == "Bearer abc"


def test_logout_clears_session_even_when_the_call_fails(admin_session):
    http = FakeHttp({("POST", "/auth/logout"): ({"success": False}, 500)})
    client = AdminApiClient(admin_session, BASE_URL, http=http)
    with pytest.raises(ApiError):
        client.logout()
    assert not admin_session.is_authenticated


def test_sessions_are_isolated():
    http = FakeHttp()
    first = AdminApiClient(AdminSession(token="one"), BASE_URL, http=http)
    second = AdminApiClient(AdminSession(token="two"), BASE_URL, http=http)
    first.get_users()
    second.get_users()
    assert [c["headers"]["Authorization"] for c in http.calls] == ["Bearer one", "Bearer two"]


def test_coin_change_hits_add_or_deduct_endpoint(client, http):
    client.update_user_coins("u1", 50, "add", "bonus")
    client.update_user_coins("u1", 20, "deduct", "fraud")
    assert http.paths("POST") == ["/users/u1/add-coins", "/users/u1/deduct-coins"]
    assert http.calls[0]["json"] == {"amount": 50, "reason": "bonus"}


def test_wallet_adjustment_names_the_wallet(client, http):
    client.adjust_user_coins("u1", -5, "mining", "correction")
    assert http.calls[0]["path"] == "/users/u1/adjust-coins"
    assert http.calls[0]["json"] == {"amount": -5, "walletType": "mining", "reason": "correction"}


def test_settings_bulk_update_wraps_body(client, http):
    client.update_settings({"appName": "Miner"})
    assert http.calls[0]["path"] == "/settings/bulk"
    assert http.calls[0]["json"] == {"settings": {"appName": "Miner"}}


def test_from_config_reads_base_url_and_timeout():
    config = {"ADMIN_API_BASE_URL": BASE_URL + "/", "REQUEST_TIMEOUT_SECONDS": 7, "API_MAX_RETRIES": 2}
    client = AdminApiClient.from_config(config, AdminSession())
    assert client.base_url == BASE_URL
    assert client.timeout == 7
    assert client.http.get_adapter("https://api.test").max_retries.total == 2


def test_admin_session_round_trips_through_a_store():
    store = {}
    AdminSession(token="t1", admin={"id": "a1"}).save_to(store)
    restored = AdminSession.from_mapping(store)
    assert restored.token == "t1" and restored.admin == {"id": "a1"}

    restored.clear()
    restored.save_to(store)
    assert store == {}
