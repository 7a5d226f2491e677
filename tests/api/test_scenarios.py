"""End-to-end request scenarios against the API routes."""

JWT = "a" * 32


class TestSignup:
    def test_valid_signup(self, client, signup_body):
        response = client.post("/signup?token=abc_123", json=signup_body)
        assert response.status_code == 201
        assert response.text == "abc_123"

    def test_repeat_password_mismatch(self, client, signup_body):
        body = {**signup_body, "repeat_password": "mismatch"}
        response = client.post("/signup?token=abc", json=body)
        assert response.status_code == 400
        data = response.json()
        assert data["statusCode"] == 400
        assert data["error"] == "Bad Request"
        assert data["message"] == "Validation failed"
        assert data["validation"]["body"]["keys"] == ["repeat_password"]
        assert "password" in data["validation"]["body"]["message"]

    def test_underage(self, client, signup_body):
        response = client.post("/signup?token=abc", json={**signup_body, "age": 17})
        assert response.status_code == 400
        body = response.json()["validation"]["body"]
        assert body["keys"] == ["age"]
        assert "18" in body["message"]

    def test_missing_token(self, client, signup_body):
        response = client.post("/signup", json=signup_body)
        assert response.status_code == 400
        validation = response.json()["validation"]
        assert list(validation) == ["query"]
        assert validation["query"] == {
            "source": "query",
            "keys": ["token"],
            "message": '"token" is required',
        }

    def test_body_and_query_together(self, client, signup_body):
        response = client.post("/signup", json={**signup_body, "age": 17})
        validation = response.json()["validation"]
        assert list(validation) == ["body", "query"]


class TestNotes:
    def test_short_note_id(self, client):
        response = client.get("/notes/abcd1234")
        assert response.status_code == 400
        assert response.json()["validation"]["params"]["keys"] == ["noteId"]

    def test_valid_note_id(self, client):
        response = client.get("/notes/abcdef123456")
        assert response.status_code == 200
        assert response.json() == {"noteId": "abcdef123456"}


class TestWhoAmI:
    def test_extra_headers_are_allowed(self, client):
        response = client.get(
            "/whoami",
            headers={"x-client-id": "client_1", "x-trace": "t-1", "accept-language": "en"},
        )
        assert response.status_code == 200
        assert response.json() == {"client_id": "client_1"}

    def test_missing_client_id(self, client):
        response = client.get("/whoami")
        assert response.status_code == 400
        assert response.json()["validation"]["headers"]["keys"] == ["x-client-id"]


class TestProfile:
    def test_short_name(self, client, signer):
        response = client.get("/profile", headers={"cookie": f"name=J; jwt={signer.sign(JWT)}"})
        assert response.status_code == 400
        validation = response.json()["validation"]
        assert list(validation) == ["cookies"]
        assert validation["cookies"]["keys"] == ["name"]

    def test_valid_cookies_are_echoed(self, client, signer):
        response = client.get("/profile", headers={"cookie": f"name=Alice; jwt={signer.sign(JWT)}"})
        assert response.status_code == 200
        assert response.json() == {"name": "Alice", "jwt": JWT}

    def test_forged_signed_cookie(self, client):
        response = client.get("/profile", headers={"cookie": f"name=Alice; jwt=s:{JWT}.forged"})
        assert response.status_code == 400
        signed = response.json()["validation"]["signedCookies"]
        assert signed == {
            "source": "signedCookies",
            "keys": ["jwt"],
            "message": '"jwt" must be a string',
        }


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["validated_routes"] == 4
