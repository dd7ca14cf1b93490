from utils.logger import sanitize_log_data


def test_password_fields_redacted():
    data = {"email": "buyer@example.com", "password": "farmfresh123", "password_hash": "$2b$12$abc"}
    sanitized = sanitize_log_data(data)

    assert sanitized["email"] == "buyer@example.com"
    assert sanitized["password"] == "***REDACTED***"
    assert sanitized["password_hash"] == "***REDACTED***"


def test_auth_cookie_keeps_prefix_only():
    data = {"auth_token": "eyJhbGciOiJIUzI1NiJ9.payload.signature"}
    sanitized = sanitize_log_data(data)

    assert sanitized["auth_token"] == "eyJhbGci..."


def test_nested_payload_sanitized():
    data = {"customer_info": {"name": "Juan", "password": "secret123"}}
    sanitized = sanitize_log_data(data)

    assert sanitized["customer_info"]["name"] == "Juan"
    assert sanitized["customer_info"]["password"] == "***REDACTED***"
    # the input is left untouched
    assert data["customer_info"]["password"] == "secret123"


def test_order_fields_unchanged():
    data = {"order_id": 12, "product_id": 4, "quantity": 3, "client_ip": "127.0.0.1"}
    assert sanitize_log_data(data) == data


def test_dicts_inside_lists_sanitized():
    data = {"items": [{"product_id": 4, "token": "abcdefghijkl"}, "note"]}
    sanitized = sanitize_log_data(data)

    assert sanitized["items"][0] == {"product_id": 4, "token": "abcdefgh..."}
    assert sanitized["items"][1] == "note"
