"""Transcript, dubbing and rendered video API tests."""

from __future__ import annotations

import os
import unittest

from fastapi.testclient import TestClient

from nexus.core.config import get_settings
from nexus.main import create_app
from nexus.repositories.memory import InMemoryStore
from nexus.services.dubbing import DubbingService
from nexus.services.rendered_videos import RenderedVideoService
from nexus.services.transcripts import TranscriptService


class _SettingsEnvCase(unittest.TestCase):
    _env_keys = (
        "NEXUS_AUTH_PROVIDER",
        "NEXUS_FIREBASE_PROJECT_ID",
        "NEXUS_FIREBASE_AUDIENCE",
        "NEXUS_STRICT_STATUS_TRANSITIONS",
    )

    def setUp(self) -> None:
        self._old_env = {k: os.environ.get(k) for k in self._env_keys}
        os.environ["NEXUS_AUTH_PROVIDER"] = "mock"
        os.environ["NEXUS_FIREBASE_PROJECT_ID"] = "test-project"
        os.environ["NEXUS_FIREBASE_AUDIENCE"] = "test-audience"
        os.environ.pop("NEXUS_STRICT_STATUS_TRANSITIONS", None)
        get_settings.cache_clear()

    def tearDown(self) -> None:
        for key, value in self._old_env.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value
        get_settings.cache_clear()


OWNER = {"Authorization": "Bearer test:owner"}
OTHER = {"Authorization": "Bearer test:other"}


class _MediaCase(_SettingsEnvCase):
    def setUp(self) -> None:
        super().setUp()
        self.app = create_app()
        self.client = TestClient(self.app)

    def _video(self, headers: dict[str, str] = OWNER) -> dict:
        response = self.client.post(
            "/api/v1/videos",
            headers=headers,
            json={"url": "https://www.youtube.com/watch?v=media", "target_language": "es"},
        )
        self.assertEqual(response.status_code, 201)
        return response.json()

    def _transcript(self, video_id: int, headers: dict[str, str] = OWNER) -> dict:
        response = self.client.post(
            f"/api/v1/videos/{video_id}/transcript",
            headers=headers,
            json={"language": "en"},
        )
        self.assertEqual(response.status_code, 201)
        return response.json()


class TranscriptApiTests(_MediaCase):
    def test_latest_transcript_is_null_until_one_exists(self) -> None:
        video = self._video()

        empty = self.client.get(f"/api/v1/videos/{video['id']}/transcript", headers=OWNER)
        self.assertEqual(empty.status_code, 200)
        self.assertIsNone(empty.json())

        first = self._transcript(video["id"])
        second = self._transcript(video["id"])
        latest = self.client.get(f"/api/v1/videos/{video['id']}/transcript", headers=OWNER).json()

        self.assertEqual(first["status"], "pending")
        self.assertEqual(first["content"], "")
        self.assertEqual(latest["id"], second["id"])

    def test_update_stores_segments_and_follows_transcript_lifecycle(self) -> None:
        video = self._video()
        transcript = self._transcript(video["id"])

        updated = self.client.patch(
            f"/api/v1/transcripts/{transcript['id']}",
            headers=OWNER,
            json={
                "status": "processing",
                "content": "hola mundo",
                "segments": [{"start": 0, "end": 1.5, "text": "hola"}, {"start": 1.5, "end": 2.0, "text": "mundo"}],
            },
        )
        self.assertEqual(updated.status_code, 200)
        self.assertEqual(updated.json()["content"], "hola mundo")
        self.assertEqual(len(updated.json()["segments"]), 2)

        cancelled = self.client.patch(
            f"/api/v1/transcripts/{transcript['id']}", headers=OWNER, json={"status": "cancelled"}
        )
        self.assertEqual(cancelled.status_code, 422)

    def test_segment_end_before_start_is_rejected(self) -> None:
        video = self._video()
        transcript = self._transcript(video["id"])

        response = self.client.patch(
            f"/api/v1/transcripts/{transcript['id']}",
            headers=OWNER,
            json={"segments": [{"start": 3, "end": 1, "text": "backwards"}]},
        )

        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.json()["code"], "VALIDATION_ERROR")

    def test_foreign_video_and_transcript_are_not_found(self) -> None:
        video = self._video()
        transcript = self._transcript(video["id"])

        reads = self.client.get(f"/api/v1/videos/{video['id']}/transcript", headers=OTHER)
        writes = self.client.post(f"/api/v1/videos/{video['id']}/transcript", headers=OTHER, json={"language": "en"})
        updates = self.client.patch(
            f"/api/v1/transcripts/{transcript['id']}", headers=OTHER, json={"content": "hijacked"}
        )

        for response in (reads, writes, updates):
            with self.subTest(method=response.request.method):
                self.assertEqual(response.status_code, 404)
                self.assertEqual(response.json()["code"], "RESOURCE_NOT_FOUND")
        self.assertEqual(len(self.app.state.store.transcripts), 1)
        self.assertEqual(self.app.state.store.transcripts[transcript["id"]].content, "")


class DubbingApiTests(_MediaCase):
    def test_dubbing_defaults_to_latest_transcript(self) -> None:
        video = self._video()
        self._transcript(video["id"])
        latest = self._transcript(video["id"])

        response = self.client.post(
            f"/api/v1/videos/{video['id']}/dubbing",
            headers=OWNER,
            json={"target_language": "es", "voice_profile": "narrator", "voice_params": {"speed": 1.1}},
        )

        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body["transcript_id"], latest["id"])
        self.assertEqual(body["status"], "pending")
        self.assertEqual(body["voice_params"], {"speed": 1.1})
        fetched = self.client.get(f"/api/v1/videos/{video['id']}/dubbing", headers=OWNER).json()
        self.assertEqual(fetched["id"], body["id"])

    def test_dubbing_without_any_transcript_conflicts(self) -> None:
        video = self._video()

        response = self.client.post(
            f"/api/v1/videos/{video['id']}/dubbing",
            headers=OWNER,
            json={"target_language": "es", "voice_profile": "narrator"},
        )

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["code"], "TRANSCRIPT_REQUIRED")
        self.assertEqual(self.app.state.store.dubbing, {})

    def test_transcript_from_another_video_is_not_found(self) -> None:
        first = self._video()
        second = self._video()
        transcript = self._transcript(first["id"])

        response = self.client.post(
            f"/api/v1/videos/{second['id']}/dubbing",
            headers=OWNER,
            json={"target_language": "es", "voice_profile": "narrator", "transcript_id": transcript["id"]},
        )

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["code"], "RESOURCE_NOT_FOUND")

    def test_update_sets_output_and_rejects_blank_voice_profile_on_create(self) -> None:
        video = self._video()
        self._transcript(video["id"])
        dubbing = self.client.post(
            f"/api/v1/videos/{video['id']}/dubbing",
            headers=OWNER,
            json={"target_language": "es", "voice_profile": "narrator"},
        ).json()

        updated = self.client.patch(
            f"/api/v1/dubbing/{dubbing['id']}",
            headers=OWNER,
            json={"status": "processing", "output_url": "https://cdn.example.com/d/1.mp3", "processing_time": 12},
        )
        self.assertEqual(updated.status_code, 200)
        self.assertEqual(updated.json()["output_url"], "https://cdn.example.com/d/1.mp3")
        self.assertEqual(updated.json()["processing_time"], 12)

        blank = self.client.post(
            f"/api/v1/videos/{video['id']}/dubbing",
            headers=OWNER,
            json={"target_language": "es", "voice_profile": " "},
        )
        self.assertEqual(blank.status_code, 422)

    def test_foreign_dubbing_update_is_not_found(self) -> None:
        video = self._video()
        self._transcript(video["id"])
        dubbing = self.client.post(
            f"/api/v1/videos/{video['id']}/dubbing",
            headers=OWNER,
            json={"target_language": "es", "voice_profile": "narrator"},
        ).json()

        response = self.client.patch(f"/api/v1/dubbing/{dubbing['id']}", headers=OTHER, json={"status": "error"})

        self.assertEqual(response.status_code, 404)
        self.assertEqual(self.app.state.store.dubbing[dubbing["id"]].status.value, "pending")


class RenderedVideoApiTests(_MediaCase):
    def _dubbing(self, video_id: int) -> dict:
        self._transcript(video_id)
        response = self.client.post(
            f"/api/v1/videos/{video_id}/dubbing",
            headers=OWNER,
            json={"target_language": "fr", "voice_profile": "narrator"},
        )
        self.assertEqual(response.status_code, 201)
        return response.json()

    def test_render_inherits_target_language_from_dubbing(self) -> None:
        video = self._video()
        dubbing = self._dubbing(video["id"])

        response = self.client.post(
            f"/api/v1/videos/{video['id']}/rendered-videos",
            headers=OWNER,
            json={"render_type": "both", "dubbing_id": dubbing["id"]},
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["target_language"], "fr")
        self.assertEqual(response.json()["render_type"], "both")
        latest = self.client.get(f"/api/v1/videos/{video['id']}/rendered-videos", headers=OWNER).json()
        self.assertEqual(latest["id"], response.json()["id"])

    def test_subtitle_render_without_dubbing(self) -> None:
        video = self._video()

        response = self.client.post(
            f"/api/v1/videos/{video['id']}/rendered-videos",
            headers=OWNER,
            json={"render_type": "subtitles", "target_language": "de"},
        )

        self.assertEqual(response.status_code, 201)
        self.assertIsNone(response.json()["dubbing_id"])
        self.assertEqual(response.json()["target_language"], "de")

    def test_dubbing_from_another_video_is_not_found(self) -> None:
        first = self._video()
        second = self._video()
        dubbing = self._dubbing(first["id"])

        response = self.client.post(
            f"/api/v1/videos/{second['id']}/rendered-videos",
            headers=OWNER,
            json={"render_type": "dubbing", "dubbing_id": dubbing["id"]},
        )

        self.assertEqual(response.status_code, 404)
        self.assertEqual(self.app.state.store.rendered_videos, {})

    def test_update_walks_lifecycle_and_rejects_reopening_completed_render(self) -> None:
        video = self._video()
        rendered = self.client.post(
            f"/api/v1/videos/{video['id']}/rendered-videos",
            headers=OWNER,
            json={"render_type": "subtitles"},
        ).json()
        path = f"/api/v1/rendered-videos/{rendered['id']}"

        self.assertEqual(self.client.patch(path, headers=OWNER, json={"status": "processing"}).status_code, 200)
        done = self.client.patch(
            path,
            headers=OWNER,
            json={"status": "completed", "output_url": "https://cdn.example.com/r/1.mp4", "file_size": 2048},
        )
        self.assertEqual(done.status_code, 200)
        self.assertEqual(done.json()["file_size"], 2048)

        reopened = self.client.patch(path, headers=OWNER, json={"status": "processing"})
        self.assertEqual(reopened.status_code, 409)
        self.assertEqual(reopened.json()["code"], "FSM_TERMINAL_IMMUTABLE")


class MediaServiceDegradedReadTests(unittest.TestCase):
    def test_latest_reads_return_none_when_store_is_unavailable(self) -> None:
        store = InMemoryStore()
        owner = store.upsert_user(open_id="owner")
        video = store.create_video(user_id=owner.id, url="https://vimeo.com/1")
        store.create_transcript(video_id=video.id, language="en")
        store.available = False

        self.assertIsNone(TranscriptService(store).get_latest_transcript(owner_id=owner.id, video_id=video.id))
        self.assertIsNone(DubbingService(store).get_latest_dubbing(owner_id=owner.id, video_id=video.id))
        self.assertIsNone(
            RenderedVideoService(store).get_latest_rendered_video(owner_id=owner.id, video_id=video.id)
        )


if __name__ == "__main__":
    unittest.main()
