"""Tests for the login hint endpoint."""


class TestLoginHint:
    def test_signed_out(self, signed_out_container, client):
        data = client.get("/login").json()
        assert data["authenticated"] is False
        assert "rechargeearn login" in data["message"]

    def test_signed_in(self, container, client):
        data = client.get("/login").json()
        assert data["authenticated"] is True
        assert data["user"] == "jane@x.com"

    def test_redirect_lands_here(self, signed_out_container, client):
        """Following the guard's redirect ends on the hint page."""
        response = client.get("/payment/failed")
        assert response.status_code == 200
        assert response.json()["authenticated"] is False
