"""Tests for the admin session endpoints."""
from __future__ import annotations

from http import HTTPStatus
import unittest
from unittest.mock import patch

from flask_jwt_extended import decode_token

from academy_gateway.app import create_app
from fakes import FakeUpstreamResponse, sent_json, sent_request, upstream_error

BACKEND = "http://backend.test/api"
EPOCH = "Expires=Thu, 01 Jan 1970 00:00:00 GMT"


class AuthRoutesTestCase(unittest.TestCase):
    """Login, logout, profile lookup and password reset."""

    def setUp(self) -> None:
        self.app = create_app("testing")
        self.app.config.update(BACKEND_API_BASE=BACKEND)
        self.client = self.app.test_client(use_cookies=False)

    def _set_cookies(self, response, name: str) -> list[str]:
        return [
            header
            for header in response.headers.getlist("Set-Cookie")
            if header.startswith(f"{name}=")
        ]

    def _cookie_value(self, response, name: str) -> str:
        header = self._set_cookies(response, name)[-1]
        return header.split(";", 1)[0].split("=", 1)[1]

    def _assert_cleared(self, response, name: str) -> None:
        headers = self._set_cookies(response, name)
        self.assertTrue(headers, f"{name} was not cleared")
        self.assertTrue(
            any(f"{name}=;" in header and "Max-Age=0" in header and EPOCH in header for header in headers),
            headers,
        )

    # ------------------------------------------------------------------
    # Logout
    # ------------------------------------------------------------------
    def test_logout_clears_session_cookies(self) -> None:
        response = self.client.post("/api/admin/auth/logout")

        self.assertEqual(response.status_code, HTTPStatus.NO_CONTENT)
        self.assertEqual(response.headers["Cache-Control"], "no-store")
        for name in ("admin_token", "admin_ui", "providerId", "adminProviderId", "aid"):
            self._assert_cleared(response, name)

    def test_logout_redirect_sends_browser_to_login(self) -> None:
        response = self.client.get("/api/admin/auth/logout?redirect=1")

        self.assertEqual(response.status_code, HTTPStatus.FOUND)
        self.assertTrue(
            response.headers["Location"].endswith("/admin/login?next=/admin/bookings")
        )
        self._assert_cleared(response, "admin_token")
        self._assert_cleared(response, "admin_ui")

    # ------------------------------------------------------------------
    # Login
    # ------------------------------------------------------------------
    def test_configured_admin_logs_in_without_backend(self) -> None:
        self.app.config.update(ADMIN_EMAIL="admin@academy.test", ADMIN_PASSWORD="s3cret")
        with patch("urllib.request.urlopen") as urlopen:
            response = self.client.post(
                "/api/admin/auth/login",
                json={"email": " Admin@Academy.test ", "password": "s3cret"},
            )

        urlopen.assert_not_called()
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(response.get_json()["user"]["id"], "env-admin")
        token = self._cookie_value(response, "admin_token")
        with self.app.app_context():
            claims = decode_token(token)
        self.assertEqual(claims["sub"], "env-admin")
        self.assertEqual(claims["role"], "super")
        self.assertIn("HttpOnly", self._set_cookies(response, "admin_token")[-1])
        self.assertEqual(self._cookie_value(response, "admin_ui"), "1")

    def test_configured_admin_with_wrong_password_is_rejected(self) -> None:
        self.app.config.update(ADMIN_EMAIL="admin@academy.test", ADMIN_PASSWORD="s3cret")
        with patch("urllib.request.urlopen") as urlopen:
            response = self.client.post(
                "/api/admin/auth/login",
                json={"email": "admin@academy.test", "password": "nope"},
            )

        urlopen.assert_not_called()
        self.assertEqual(response.status_code, HTTPStatus.UNAUTHORIZED)
        self.assertEqual(self._set_cookies(response, "admin_token"), [])

    def test_backend_login_issues_session_for_user_id(self) -> None:
        upstream = FakeUpstreamResponse(
            {"ok": True, "user": {"id": "prov-9", "email": "coach@academy.test"}}
        )
        with patch("urllib.request.urlopen", return_value=upstream) as urlopen:
            response = self.client.post(
                "/api/admin/auth/login",
                json={"email": "Coach@Academy.test", "password": "pw"},
            )

        self.assertEqual(sent_request(urlopen).full_url, f"{BACKEND}/admin/auth/login")
        self.assertEqual(sent_json(urlopen), {"email": "coach@academy.test", "password": "pw"})
        self.assertEqual(response.status_code, HTTPStatus.OK)
        with self.app.app_context():
            claims = decode_token(self._cookie_value(response, "admin_token"))
        self.assertEqual(claims["sub"], "prov-9")
        self.assertEqual(claims["email"], "coach@academy.test")

    def test_backend_login_failure_is_relayed(self) -> None:
        error = upstream_error(401, {"ok": False, "error": "Invalid credentials"})
        with patch("urllib.request.urlopen", side_effect=error):
            response = self.client.post(
                "/api/admin/auth/login", json={"email": "a@b.de", "password": "x"}
            )

        self.assertEqual(response.status_code, HTTPStatus.UNAUTHORIZED)
        self.assertEqual(response.get_json(), {"ok": False, "error": "Invalid credentials"})
        self.assertEqual(self._set_cookies(response, "admin_token"), [])

    def test_backend_login_without_user_id_is_a_gateway_error(self) -> None:
        upstream = FakeUpstreamResponse({"ok": True, "user": {}})
        with patch("urllib.request.urlopen", return_value=upstream):
            response = self.client.post(
                "/api/admin/auth/login", json={"email": "a@b.de", "password": "x"}
            )

        self.assertEqual(response.status_code, HTTPStatus.BAD_GATEWAY)
        self.assertEqual(self._set_cookies(response, "admin_token"), [])

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------
    def test_me_requires_an_email(self) -> None:
        response = self.client.get("/api/admin/auth/me")
        self.assertEqual(response.status_code, HTTPStatus.UNAUTHORIZED)

    def test_me_returns_backend_profile(self) -> None:
        profile = FakeUpstreamResponse(
            {"user": {"_id": "prov-2", "fullName": "Lena Kraft", "email": "lena@academy.test"}}
        )
        with patch("urllib.request.urlopen", return_value=profile) as urlopen:
            response = self.client.get(
                "/api/admin/auth/me",
                headers={"Cookie": "admin_email=lena@academy.test; providerId=prov-2"},
            )

        request = sent_request(urlopen)
        self.assertEqual(
            request.full_url, f"{BACKEND}/admin/auth/profile?email=lena%40academy.test"
        )
        self.assertEqual(request.get_header("X-provider-id"), "prov-2")
        self.assertEqual(
            response.get_json(),
            {
                "ok": True,
                "user": {
                    "id": "prov-2",
                    "fullName": "Lena Kraft",
                    "email": "lena@academy.test",
                    "avatarUrl": None,
                },
            },
        )

    # ------------------------------------------------------------------
    # Forgot password
    # ------------------------------------------------------------------
    def test_forgot_rejects_invalid_email(self) -> None:
        with patch("urllib.request.urlopen") as urlopen:
            response = self.client.post("/api/admin/auth/forgot", json={"email": "nope"})

        urlopen.assert_not_called()
        self.assertEqual(response.status_code, HTTPStatus.BAD_REQUEST)
        self.assertEqual(response.get_json(), {"ok": False, "error": "Invalid email"})

    def test_forgot_forwards_normalized_email(self) -> None:
        with patch(
            "urllib.request.urlopen", return_value=FakeUpstreamResponse({"ok": True})
        ) as urlopen:
            response = self.client.post(
                "/api/admin/auth/forgot", json={"email": " Lena@Academy.test "}
            )

        self.assertEqual(sent_json(urlopen), {"email": "lena@academy.test"})
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(response.get_json(), {"ok": True, "message": "Reset email sent"})

    def test_forgot_only_accepts_post(self) -> None:
        response = self.client.get("/api/admin/auth/forgot")
        self.assertEqual(response.status_code, HTTPStatus.METHOD_NOT_ALLOWED)
        self.assertEqual(response.headers["Allow"], "POST, OPTIONS")

        preflight = self.client.options("/api/admin/auth/forgot")
        self.assertEqual(preflight.status_code, HTTPStatus.NO_CONTENT)
        self.assertEqual(preflight.headers["Allow"], "POST, OPTIONS")


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
