from utils.hashing import verify_password, hash_password


def test_password_hashing():
    hashed = hash_password("farmfresh123")
    assert hashed != "farmfresh123"
    assert hashed.startswith("$2")


def test_password_verification():
    hashed = hash_password("farmfresh123")

    assert verify_password("farmfresh123", hashed) is True
    assert verify_password("wrongpassword", hashed) is False


def test_long_password_verifies():
    long_pass = "a" * 100
    assert verify_password(long_pass, hash_password(long_pass)) is True


def test_missing_or_malformed_hash_is_rejected():
    assert verify_password("farmfresh123", None) is False
    assert verify_password("farmfresh123", "not-a-bcrypt-hash") is False
