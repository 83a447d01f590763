"""Authentication dependency, session and adapter tests."""

from __future__ import annotations

import os
import sys
import types
from typing import Annotated
import unittest
from unittest.mock import patch

from fastapi import Depends, Request
from fastapi.testclient import TestClient

from nexus.adapters.auth.base import AuthVerificationError
from nexus.adapters.auth.firebase_auth import FirebaseTokenVerifier
from nexus.adapters.auth.mock_auth import MockTokenVerifier
from nexus.core.config import Settings, get_settings
from nexus.main import create_app
from nexus.repositories.memory import InMemoryStore, UserRecord
from nexus.routes.dependencies import get_current_user, get_token_verifier


class _SettingsEnvCase(unittest.TestCase):
    _env_keys = (
        "NEXUS_AUTH_PROVIDER",
        "NEXUS_FIREBASE_PROJECT_ID",
        "NEXUS_FIREBASE_AUDIENCE",
        "NEXUS_OWNER_OPEN_ID",
        "NEXUS_STRICT_STATUS_TRANSITIONS",
    )

    def setUp(self) -> None:
        self._old_env = {k: os.environ.get(k) for k in self._env_keys}
        os.environ["NEXUS_AUTH_PROVIDER"] = "mock"
        os.environ["NEXUS_FIREBASE_PROJECT_ID"] = "test-project"
        os.environ["NEXUS_FIREBASE_AUDIENCE"] = "test-audience"
        os.environ["NEXUS_OWNER_OPEN_ID"] = "owner-open-id"
        os.environ.pop("NEXUS_STRICT_STATUS_TRANSITIONS", None)
        get_settings.cache_clear()

    def tearDown(self) -> None:
        for key, value in self._old_env.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value
        get_settings.cache_clear()


class AuthApiTests(_SettingsEnvCase):
    def test_openapi_lists_resource_paths_and_structured_validation_schema(self) -> None:
        client = TestClient(create_app())

        response = client.get("/openapi.json")
        self.assertEqual(response.status_code, 200)
        document = response.json()
        paths = document["paths"]

        for path in (
            "/api/v1/auth/me",
            "/api/v1/auth/logout",
            "/api/v1/videos",
            "/api/v1/videos/{videoId}",
            "/api/v1/videos/{videoId}/transcript",
            "/api/v1/transcripts/{transcriptId}",
            "/api/v1/videos/{videoId}/dubbing",
            "/api/v1/dubbing/{dubbingId}",
            "/api/v1/videos/{videoId}/rendered-videos",
            "/api/v1/rendered-videos/{renderedVideoId}",
            "/api/v1/tasks",
            "/api/v1/tasks/{taskId}",
            "/api/v1/tasks/{taskId}/comments",
            "/api/v1/comments/{commentId}",
        ):
            with self.subTest(path=path):
                self.assertIn(path, paths)

        self.assertEqual(
            paths["/api/v1/videos/{videoId}"]["get"]["responses"]["404"]["content"]["application/json"]["schema"]["$ref"],
            "#/components/schemas/NoLeakNotFoundError",
        )
        self.assertEqual(
            paths["/api/v1/videos"]["post"]["responses"]["422"]["content"]["application/json"]["schema"]["$ref"],
            "#/components/schemas/RequestValidationErrorResponse",
        )
        self.assertIn("RequestValidationErrorResponse", document["components"]["schemas"])
        self.assertNotIn("HTTPValidationError", document["components"]["schemas"])

    def test_missing_authorization_returns_401_and_no_video_side_effect(self) -> None:
        app = create_app()
        client = TestClient(app)

        response = client.post(
            "/api/v1/videos",
            json={"url": "https://www.youtube.com/watch?v=abc", "target_language": "es"},
        )

        self.assertEqual(response.status_code, 401)
        self.assertEqual(
            response.json(),
            {"code": "UNAUTHORIZED", "message": "Unauthorized: User must be logged in"},
        )
        self.assertEqual(app.state.store.videos, {})
        self.assertEqual(app.state.store.write_count, 0)

    def test_invalid_bearer_token_returns_401(self) -> None:
        app = create_app()
        client = TestClient(app)

        with self.assertLogs("nexus.routes.dependencies", level="WARNING") as captured:
            response = client.get("/api/v1/videos", headers={"Authorization": "Bearer nope"})

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["code"], "UNAUTHORIZED")
        self.assertTrue(any("auth.rejected" in line for line in captured.output))
        self.assertFalse(any("nope" in line for line in captured.output))

    def test_session_cookie_authenticates_when_no_bearer_is_sent(self) -> None:
        client = TestClient(create_app())

        response = client.get("/api/v1/videos", headers={"Cookie": "nexus_session=test:cookie-user"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), [])

    def test_me_is_public_and_returns_null_without_credentials(self) -> None:
        client = TestClient(create_app())

        response = client.get("/api/v1/auth/me")

        self.assertEqual(response.status_code, 200)
        self.assertIsNone(response.json())

    def test_me_upserts_user_and_refreshes_sign_in(self) -> None:
        app = create_app()
        client = TestClient(app)
        headers = {"Authorization": "Bearer test:user-a:Alice"}

        first = client.get("/api/v1/auth/me", headers=headers)
        second = client.get("/api/v1/auth/me", headers=headers)

        self.assertEqual(first.status_code, 200)
        body = first.json()
        self.assertEqual(body["open_id"], "user-a")
        self.assertEqual(body["name"], "Alice")
        self.assertEqual(body["login_method"], "mock")
        self.assertEqual(body["role"], "user")
        self.assertEqual(second.json()["id"], body["id"])
        self.assertGreaterEqual(second.json()["last_signed_in"], body["last_signed_in"])
        self.assertEqual(len(app.state.store.users), 1)

    def test_owner_open_id_is_promoted_to_admin(self) -> None:
        client = TestClient(create_app())

        response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer test:owner-open-id"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["role"], "admin")

    def test_me_degrades_to_null_when_store_is_unavailable(self) -> None:
        store = InMemoryStore(available=False)
        client = TestClient(create_app(store))

        response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer test:user-a"})

        self.assertEqual(response.status_code, 200)
        self.assertIsNone(response.json())

    def test_logout_clears_session_cookie(self) -> None:
        client = TestClient(create_app())

        response = client.post("/api/v1/auth/logout")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"success": True})
        set_cookie = response.headers.get("set-cookie", "")
        self.assertIn("nexus_session=", set_cookie)
        self.assertIn("Max-Age=0", set_cookie)
        self.assertIn("HttpOnly", set_cookie)

    def test_current_user_is_attached_to_request_state(self) -> None:
        app = create_app()
        captured: dict[str, object] = {}

        @app.get("/_whoami")
        async def whoami(
            request: Request,
            user: Annotated[UserRecord, Depends(get_current_user)],
        ) -> dict[str, str]:
            captured["state_user"] = request.state.current_user
            captured["principal"] = request.state.auth_principal
            return {"open_id": user.open_id}

        response = TestClient(app).get("/_whoami", headers={"Authorization": "Bearer test:session-user"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"open_id": "session-user"})
        self.assertEqual(captured["state_user"].open_id, "session-user")
        self.assertEqual(captured["principal"].login_method, "mock")

    def test_dependency_selects_mock_verifier_by_configuration(self) -> None:
        verifier = get_token_verifier(get_settings())

        self.assertIsInstance(verifier, MockTokenVerifier)

    def test_dependency_selects_firebase_verifier(self) -> None:
        settings = Settings(
            auth_provider="firebase",
            firebase_project_id="project-a",
            firebase_audience="aud-a",
        )

        verifier = get_token_verifier(settings)

        self.assertIsInstance(verifier, FirebaseTokenVerifier)


class MockVerifierUnitTests(unittest.TestCase):
    def test_mock_token_verifier_normalizes_principal(self) -> None:
        principal = MockTokenVerifier().verify_token("test:user-1:Jane Doe")

        self.assertEqual(principal.open_id, "user-1")
        self.assertEqual(principal.name, "Jane Doe")
        self.assertEqual(principal.login_method, "mock")

    def test_mock_token_verifier_rejects_invalid_token(self) -> None:
        for token in ("invalid", "test:", "prod:user-1", "test:a:b:c"):
            with self.subTest(token=token):
                with self.assertRaises(AuthVerificationError):
                    MockTokenVerifier().verify_token(token)


class FirebaseVerifierUnitTests(unittest.TestCase):
    @staticmethod
    def _fake_firebase_modules(decoded_token: dict[str, object]) -> dict[str, types.ModuleType]:
        fake_admin = types.ModuleType("firebase_admin")
        fake_auth = types.ModuleType("firebase_admin.auth")

        fake_admin._apps = []

        def initialize_app() -> object:
            app_handle = object()
            fake_admin._apps.append(app_handle)
            return app_handle

        def verify_id_token(token: str, check_revoked: bool = True) -> dict[str, object]:
            if token != "valid-jwt":
                raise ValueError("invalid token")
            if not check_revoked:
                raise ValueError("must validate revoked tokens")
            return decoded_token

        fake_admin.initialize_app = initialize_app
        fake_admin.auth = fake_auth
        fake_auth.verify_id_token = verify_id_token

        return {
            "firebase_admin": fake_admin,
            "firebase_admin.auth": fake_auth,
        }

    def test_firebase_verifier_normalizes_principal(self) -> None:
        fake_modules = self._fake_firebase_modules(
            {
                "uid": "firebase-user-1",
                "aud": "aud-a",
                "iss": "https://securetoken.google.com/project-a",
                "name": "Fire User",
                "email": "fire@example.com",
                "firebase": {"sign_in_provider": "google.com"},
            }
        )

        with patch.dict(sys.modules, fake_modules):
            verifier = FirebaseTokenVerifier(project_id="project-a", audience="aud-a")
            principal = verifier.verify_token("valid-jwt")

        self.assertEqual(principal.open_id, "firebase-user-1")
        self.assertEqual(principal.name, "Fire User")
        self.assertEqual(principal.email, "fire@example.com")
        self.assertEqual(principal.login_method, "google.com")

    def test_firebase_verifier_rejects_invalid_audience(self) -> None:
        fake_modules = self._fake_firebase_modules(
            {
                "uid": "firebase-user-1",
                "aud": "other-aud",
                "iss": "https://securetoken.google.com/project-a",
            }
        )

        with patch.dict(sys.modules, fake_modules):
            verifier = FirebaseTokenVerifier(project_id="project-a", audience="aud-a")
            with self.assertRaises(AuthVerificationError):
                verifier.verify_token("valid-jwt")

    def test_firebase_verifier_rejects_token_without_identity(self) -> None:
        fake_modules = self._fake_firebase_modules({"aud": "aud-a", "iss": "https://securetoken.google.com/project-a"})

        with patch.dict(sys.modules, fake_modules):
            verifier = FirebaseTokenVerifier(project_id="project-a", audience="aud-a")
            with self.assertRaises(AuthVerificationError):
                verifier.verify_token("valid-jwt")


if __name__ == "__main__":
    unittest.main()
