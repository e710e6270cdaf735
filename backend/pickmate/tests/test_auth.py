"""
Tests for authentication endpoints.
"""


def test_signup(client):
    """Test user signup."""
    response = client.post(
        "/api/auth/signup",
        json={
            "email": "test@example.com",
            "display_name": "Tester",
            "password": "testpassword123"
        }
    )
    assert response.status_code == 201
    body = response.json()
    assert body["email"] == "test@example.com"
    assert body["couple_id"] is None


def test_signup_duplicate_email(client):
    payload = {"email": "dup@example.com", "display_name": "Dup", "password": "testpassword123"}
    client.post("/api/auth/signup", json=payload)
    response = client.post("/api/auth/signup", json=payload)
    assert response.status_code == 400


def test_login(client):
    """Test user login."""
    client.post(
        "/api/auth/signup",
        json={
            "email": "test2@example.com",
            "display_name": "Tester",
            "password": "testpassword123"
        }
    )

    response = client.post(
        "/api/auth/login",
        json={
            "email": "test2@example.com",
            "password": "testpassword123"
        }
    )
    assert response.status_code == 200
    assert "access_token" in response.json()


def test_login_invalid_credentials(client):
    """Test login with invalid credentials."""
    response = client.post(
        "/api/auth/login",
        json={
            "email": "nonexistent@example.com",
            "password": "wrongpassword"
        }
    )
    assert response.status_code == 401


def test_me_requires_token(client, auth_headers):
    assert client.get("/api/users/me").status_code == 401

    headers = auth_headers("me@example.com", display_name="Me")
    response = client.get("/api/users/me", headers=headers)
    assert response.status_code == 200
    assert response.json()["display_name"] == "Me"
