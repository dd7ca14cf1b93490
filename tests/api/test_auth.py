from jose import jwt
from core.config import settings
from models.users import User


async def test_signup(client, session):
    response = await client.post("/api/auth/signup", json={
        "name": "Pedro Reyes",
        "email": "Pedro@Example.com",
        "password": "farmfresh",
        "phoneNumber": "09181234567",
        "address": "7 Hen House Road"
    })

    assert response.status_code == 201
    assert response.json() == {"ok": True}

    user = session.query(User).filter(User.email == "pedro@example.com").one()
    assert user.role == "user"
    assert user.phone == "09181234567"
    assert user.password_hash != "farmfresh"


async def test_signup_duplicate_email(client, customer):
    response = await client.post("/api/auth/signup", json={
        "name": "Someone Else",
        "email": customer.email,
        "password": "farmfresh",
        "phoneNumber": "09181234567",
        "address": "7 Hen House Road"
    })

    assert response.status_code == 409
    assert response.json() == {"error": "Email already registered"}


async def test_signup_invalid_payload(client):
    response = await client.post("/api/auth/signup", json={
        "name": "Pedro",
        "email": "not-an-email",
        "password": "123",
        "phoneNumber": "0",
        "address": "x"
    })

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Invalid payload"
    assert len(body["details"]) >= 4


async def test_login_sets_cookie(client, customer):
    response = await client.post("/api/auth/login", json={
        "email": customer.email,
        "password": "password123"
    })

    assert response.status_code == 200
    assert response.json() == {
        "ok": True,
        "user": {"id": customer.id, "name": customer.name, "email": customer.email, "role": "user"}
    }

    set_cookie = response.headers["set-cookie"].lower()
    assert set_cookie.startswith(f"{settings.AUTH_COOKIE_NAME}=")
    assert "httponly" in set_cookie
    assert "samesite=lax" in set_cookie
    assert "max-age=604800" in set_cookie

    token = response.cookies[settings.AUTH_COOKIE_NAME]
    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    assert payload["sub"] == str(customer.id)
    assert payload["role"] == "user"


async def test_login_wrong_password(client, customer):
    response = await client.post("/api/auth/login", json={
        "email": customer.email,
        "password": "wrong-password"
    })

    assert response.status_code == 401
    assert response.json() == {"error": "Invalid email or password"}


async def test_login_unknown_email(client):
    response = await client.post("/api/auth/login", json={
        "email": "nobody@example.com",
        "password": "password123"
    })

    assert response.status_code == 401


async def test_me_after_login(client, customer):
    await client.post("/api/auth/login", json={"email": customer.email, "password": "password123"})

    response = await client.get("/api/auth/me")

    assert response.status_code == 200
    assert response.json()["user"] == {
        "id": customer.id,
        "email": customer.email,
        "name": customer.name,
        "phone": customer.phone,
        "address": customer.address,
        "role": "user"
    }


async def test_me_requires_cookie(client):
    response = await client.get("/api/auth/me")

    assert response.status_code == 401
    assert response.json() == {"error": "Not authenticated"}


async def test_me_with_garbage_cookie(client):
    client.cookies.set(settings.AUTH_COOKIE_NAME, "garbage")

    response = await client.get("/api/auth/me")

    assert response.status_code == 401
    assert response.json() == {"error": "Invalid token"}


async def test_logout_clears_cookie(client, customer):
    await client.post("/api/auth/login", json={"email": customer.email, "password": "password123"})

    response = await client.post("/api/auth/logout")

    assert response.status_code == 200
    assert response.json() == {"message": "Logged out successfully"}
    assert 'max-age=0' in response.headers["set-cookie"].lower()
    assert (await client.get("/api/auth/me")).status_code == 401
