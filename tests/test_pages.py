"""Tests for the page guard, presentational pages and coach uploads."""
from __future__ import annotations

import io
from http import HTTPStatus
from pathlib import Path
import tempfile
import unittest

from academy_gateway.app import create_app

SESSION = {"Cookie": "admin_token=anything"}


class PageGuardTestCase(unittest.TestCase):
    """Redirects applied before page views run."""

    def setUp(self) -> None:
        self.app = create_app("testing")
        self.client = self.app.test_client(use_cookies=False)

    def test_admin_pages_redirect_to_login_with_next(self) -> None:
        response = self.client.get("/admin/bookings?status=open")

        self.assertEqual(response.status_code, HTTPStatus.FOUND)
        self.assertTrue(
            response.headers["Location"].endswith(
                "/admin/login?next=%2Fadmin%2Fbookings%3Fstatus%3Dopen"
            )
        )

    def test_trainings_needs_a_session(self) -> None:
        response = self.client.get("/trainings")

        self.assertEqual(response.status_code, HTTPStatus.FOUND)
        self.assertTrue(response.headers["Location"].endswith("/admin/login?next=%2Ftrainings"))
        self.assertEqual(self.client.get("/trainings", headers=SESSION).status_code, HTTPStatus.OK)

    def test_account_pages_stay_public(self) -> None:
        for path in ("/admin/login", "/admin/signup", "/admin/password-reset", "/admin/new-password"):
            response = self.client.get(path)
            self.assertEqual(response.status_code, HTTPStatus.OK, path)

    def test_session_cookie_opens_admin_sections(self) -> None:
        self.assertEqual(self.client.get("/admin", headers=SESSION).status_code, HTTPStatus.OK)
        response = self.client.get("/admin/online-bookings", headers=SESSION)
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertIn(b"Online bookings", response.data)
        missing = self.client.get("/admin/unknown", headers=SESSION)
        self.assertEqual(missing.status_code, HTTPStatus.NOT_FOUND)

    def test_booking_form_is_only_served_embedded(self) -> None:
        response = self.client.get("/book?offerId=o1")
        self.assertEqual(response.status_code, HTTPStatus.FOUND)
        self.assertTrue(response.headers["Location"].endswith("/"))

        embedded = self.client.get("/book?embed=1&offerId=o1")
        self.assertEqual(embedded.status_code, HTTPStatus.OK)

    def test_fixed_redirects_and_public_pages(self) -> None:
        response = self.client.get("/customers")
        self.assertEqual(response.status_code, HTTPStatus.FOUND)
        self.assertTrue(response.headers["Location"].endswith("/admin/customers"))

        self.assertEqual(self.client.get("/").status_code, HTTPStatus.OK)
        self.assertEqual(self.client.get("/orte").status_code, HTTPStatus.OK)

    def test_debug_cookie_page_is_hidden_outside_debug(self) -> None:
        response = self.client.get("/debug/cookies", headers=SESSION)
        self.assertEqual(response.status_code, HTTPStatus.NOT_FOUND)
        rules = {rule.rule for rule in self.app.url_map.iter_rules()}
        self.assertNotIn("/debug/cookies", rules)

    def test_debug_cookie_page_echoes_session_in_debug_mode(self) -> None:
        app = create_app("development")
        client = app.test_client(use_cookies=False)

        response = client.get("/debug/cookies", headers=SESSION)
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(response.get_json(), {"admin_token": "anything"})


class CoachUploadTestCase(unittest.TestCase):
    """Coach images written to and served from the upload folder."""

    def setUp(self) -> None:
        self.tmpdir = tempfile.TemporaryDirectory()
        self.app = create_app("testing")
        self.app.config.update(UPLOAD_FOLDER=self.tmpdir.name)
        self.client = self.app.test_client(use_cookies=False)

    def tearDown(self) -> None:
        self.tmpdir.cleanup()

    def _upload(self, headers=None, **data):
        return self.client.post(
            "/api/uploads/coach",
            data=data,
            content_type="multipart/form-data",
            headers=headers or {"Cookie": "providerId=prov-1"},
        )

    def test_upload_and_serve_image(self) -> None:
        image = b"\x89PNG\r\n\x1a\nfake"
        response = self._upload(file=(io.BytesIO(image), "Lena Portrait.png", "image/png"))

        self.assertEqual(response.status_code, HTTPStatus.OK)
        payload = response.get_json()
        self.assertTrue(payload["filename"].startswith("Lena_Portrait-"))
        self.assertTrue(payload["filename"].endswith(".png"))
        self.assertEqual(payload["url"], f"/api/uploads/coach/{payload['filename']}")
        self.assertTrue((Path(self.tmpdir.name) / "coach" / payload["filename"]).is_file())

        served = self.client.get(payload["url"])
        self.assertEqual(served.status_code, HTTPStatus.OK)
        self.assertEqual(served.get_data(), image)
        self.assertIn("immutable", served.headers["Cache-Control"])
        served.close()

    def test_upload_requires_identity(self) -> None:
        response = self._upload(
            headers={"Cookie": "other=1"},
            file=(io.BytesIO(b"x"), "a.png", "image/png"),
        )
        self.assertEqual(response.status_code, HTTPStatus.UNAUTHORIZED)

    def test_upload_without_file_is_rejected(self) -> None:
        response = self._upload(filename="a.png")

        self.assertEqual(response.status_code, HTTPStatus.BAD_REQUEST)
        self.assertEqual(response.get_json(), {"ok": False, "error": "no file"})

    def test_serving_rejects_traversal_and_missing_files(self) -> None:
        traversal = self.client.get("/api/uploads/coach/..%2Fsecret.png")
        self.assertEqual(traversal.status_code, HTTPStatus.BAD_REQUEST)

        missing = self.client.get("/api/uploads/coach/nobody.png")
        self.assertEqual(missing.status_code, HTTPStatus.NOT_FOUND)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
