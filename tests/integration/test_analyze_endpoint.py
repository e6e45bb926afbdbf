"""
Integration tests for POST /v1/analyze and POST /v1/analyze/batch.

Images are generated in-process and submitted as base64; no network access.
"""

from __future__ import annotations

from fastapi.testclient import TestClient

from tests.helpers import NOT_AN_IMAGE_B64, checkerboard, encode_b64, flat

SHARP_B64 = encode_b64(checkerboard(120))
DARK_B64 = encode_b64(flat(3, size=120))


# ------------------------------------------------------------------ #
# Single image endpoint
# ------------------------------------------------------------------ #

class TestAnalyzeSingle:
    def test_sharp_image_returns_200(self, client: TestClient) -> None:
        response = client.post(
            "/v1/analyze",
            json={"image": {"data": SHARP_B64, "image_id": "upload_1"}},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["api_version"] == "1.0"
        result = body["result"]
        assert result["image_id"] == "upload_1"
        assert result["width_px"] == 120
        assert result["format"] == "png"
        assert result["analysis"]["quality"] == "sharp"
        assert result["analysis"]["is_blurry"] is False
        assert result["analysis"]["threshold"] == 100.0
        assert result["report"]["text"] == "Excellent quality"
        assert result["warnings"] == []

    def test_blurry_image_report(self, client: TestClient) -> None:
        response = client.post("/v1/analyze", json={"image": {"data": DARK_B64}})
        result = response.json()["result"]
        assert result["analysis"]["quality"] == "blurry"
        assert result["report"]["color"] == "text-red-600"
        assert result["report"]["status"] == "Needs Improvement"

    def test_threshold_override(self, client: TestClient) -> None:
        response = client.post(
            "/v1/analyze",
            json={"image": {"data": DARK_B64}, "threshold": 5},
        )
        analysis = response.json()["result"]["analysis"]
        assert analysis["threshold"] == 5.0
        assert analysis["is_blurry"] is False

    def test_undecodable_image_soft_fails(self, client: TestClient) -> None:
        response = client.post(
            "/v1/analyze",
            json={"image": {"data": NOT_AN_IMAGE_B64, "image_id": "bad"}},
        )
        assert response.status_code == 200
        analysis = response.json()["result"]["analysis"]
        assert analysis["quality"] == "error"
        assert analysis["blur_score"] == 0
        assert analysis["is_blurry"] is True
        assert analysis["error"].startswith("image_decode_error")

    def test_invalid_base64_returns_422(self, client: TestClient) -> None:
        response = client.post("/v1/analyze", json={"image": {"data": "abc"}})
        assert response.status_code == 422
        assert response.json()["error"] == "validation_error"

    def test_non_positive_threshold_returns_422(self, client: TestClient) -> None:
        response = client.post(
            "/v1/analyze",
            json={"image": {"data": SHARP_B64}, "threshold": 0},
        )
        assert response.status_code == 422

    def test_missing_image_field_returns_422(self, client: TestClient) -> None:
        response = client.post("/v1/analyze", json={"threshold": 100})
        assert response.status_code == 422

    def test_both_url_and_data_returns_422(self, client: TestClient) -> None:
        response = client.post(
            "/v1/analyze",
            json={
                "image": {
                    "url": "https://example.com/img.jpg",
                    "data": SHARP_B64,
                }
            },
        )
        assert response.status_code == 422


# ------------------------------------------------------------------ #
# Batch endpoint
# ------------------------------------------------------------------ #

class TestAnalyzeBatch:
    def test_batch_with_one_bad_image(self, client: TestClient) -> None:
        response = client.post(
            "/v1/analyze/batch",
            json={
                "images": [
                    {"data": SHARP_B64, "image_id": "p1"},
                    {"data": NOT_AN_IMAGE_B64, "image_id": "p2"},
                    {"data": DARK_B64, "image_id": "p3"},
                ],
            },
        )
        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 3
        assert body["succeeded"] == 2
        assert body["failed"] == 1
        assert [r["image_id"] for r in body["results"]] == ["p1", "p2", "p3"]
        assert [r["analysis"]["quality"] for r in body["results"]] == [
            "sharp", "error", "blurry",
        ]
        assert body["blurry_image_ids"] == ["p2", "p3"]
        assert body["needs_review"] is True

    def test_all_sharp_batch_needs_no_review(self, client: TestClient) -> None:
        response = client.post(
            "/v1/analyze/batch",
            json={"images": [{"data": SHARP_B64, "image_id": "a"}]},
        )
        body = response.json()
        assert body["blurry_image_ids"] == []
        assert body["needs_review"] is False

    def test_empty_batch_returns_422(self, client: TestClient) -> None:
        response = client.post("/v1/analyze/batch", json={"images": []})
        assert response.status_code == 422

    def test_batch_too_large_returns_422(self, small_batch_client: TestClient) -> None:
        images = [{"data": SHARP_B64}] * 3
        response = small_batch_client.post("/v1/analyze/batch", json={"images": images})
        assert response.status_code == 422
        assert response.json()["error"] == "batch_too_large"


# ------------------------------------------------------------------ #
# Authentication tests
# ------------------------------------------------------------------ #

class TestAuthentication:
    def test_missing_key_returns_401(self, authed_client: TestClient) -> None:
        response = authed_client.post("/v1/analyze", json={"image": {"data": SHARP_B64}})
        assert response.status_code == 401
        assert response.json()["error"] == "unauthorized"
        assert response.headers["WWW-Authenticate"] == "ApiKey"

    def test_wrong_key_returns_401(self, authed_client: TestClient) -> None:
        response = authed_client.post(
            "/v1/analyze",
            json={"image": {"data": SHARP_B64}},
            headers={"X-Api-Key": "wrong-key"},
        )
        assert response.status_code == 401

    def test_correct_key_returns_200(self, authed_client: TestClient) -> None:
        response = authed_client.post(
            "/v1/analyze",
            json={"image": {"data": SHARP_B64}},
            headers={"X-Api-Key": "test-secret"},
        )
        assert response.status_code == 200
