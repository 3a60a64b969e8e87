import pytest
from fastapi.testclient import TestClient

from portfolio_upload.main import app
from portfolio_upload.routes.upload import get_upload_pipeline
from portfolio_upload.services.multipart_parser import ParsedFile, encode_multipart
from portfolio_upload.services.rate_limiter import SlidingWindowRateLimiter, get_rate_limiter

from conftest import make_image_bytes


@pytest.fixture
def limiter():
    return SlidingWindowRateLimiter(max_requests=20, window_seconds=3600)


@pytest.fixture
def client(pipeline, limiter):
    app.dependency_overrides[get_upload_pipeline] = lambda: pipeline
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def image_part(filename="photo.jpg", mime="image/jpeg", data=None, field="file"):
    return ParsedFile(field, filename, mime, data if data is not None else make_image_bytes())


def post_form(client, url, fields=None, files=(), headers=None):
    body, content_type = encode_multipart(fields or {}, files)
    return client.post(url, content=body, headers={"content-type": content_type, **(headers or {})})


def test_health_check(client):
    assert client.get("/").status_code == 200


def test_single_upload_keeps_original_by_default(client, fake_supabase):
    response = post_form(client, "/api/upload/artistic", files=[image_part()])

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["optimizedUrl"].endswith(".webp")
    assert body["data"]["originalUrl"].endswith(".jpg")
    assert body["data"]["filename"].startswith("photo_")
    assert (body["data"]["width"], body["data"]["height"]) == (64, 48)


def test_about_section_endpoint_uses_section_folder(client, fake_supabase):
    response = post_form(client, "/api/upload/about/education", files=[image_part()])

    assert response.status_code == 200
    assert "/about/education/" in response.json()["data"]["optimizedUrl"]


def test_generic_endpoint_reads_page_fields(client):
    response = post_form(
        client,
        "/api/upload",
        fields={"page": "about", "section": "experience", "keepOriginal": "true"},
        files=[image_part()],
    )

    data = response.json()["data"]
    assert response.status_code == 200
    assert "/about/experience/" in data["optimizedUrl"]
    assert "originalUrl" in data


def test_generic_endpoint_without_keep_original(client, fake_supabase):
    response = post_form(client, "/api/upload", fields={"page": "photoshoot"}, files=[image_part()])

    assert response.status_code == 200
    assert "originalUrl" not in response.json()["data"]
    assert all(bucket == "portfolio-optimized" for bucket, _ in fake_supabase.upload_calls)


def test_generic_endpoint_requires_page(client):
    response = post_form(client, "/api/upload", files=[image_part()])

    assert response.status_code == 400
    assert response.json()["details"] == "Page parameter is required"


def test_generic_endpoint_rejects_bad_section(client, fake_supabase):
    response = post_form(client, "/api/upload", fields={"page": "about", "section": "hobbies"}, files=[image_part()])

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid page configuration"
    assert fake_supabase.upload_calls == []


def test_validation_error_response(client):
    response = post_form(client, "/api/upload/artistic", files=[image_part("anim.gif", "image/jpeg", b"GIF89a")])

    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "error": "Validation failed",
        "details": "Invalid file extension. Allowed extensions: .jpg, .jpeg, .png",
        "rule": "extension",
    }


def test_no_file_uploaded(client):
    response = post_form(client, "/api/upload/artistic", fields={"keepOriginal": "true"})

    assert response.status_code == 400
    assert response.json()["error"] == "No file uploaded"


def test_non_multipart_request(client):
    response = client.post("/api/upload/artistic", json={"file": "nope"})

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid content type"


def test_missing_boundary(client):
    response = client.post("/api/upload/artistic", content=b"--x--", headers={"content-type": "multipart/form-data"})

    assert response.status_code == 400
    assert response.json()["error"] == "Failed to parse form data"


def test_storage_failure_is_500(client, fake_supabase):
    fake_supabase.failing_buckets.add("portfolio-optimized")

    response = post_form(client, "/api/upload/achievements", files=[image_part()])

    assert response.status_code == 500
    assert response.json()["error"] == "Upload failed"


def test_unexpected_error_is_500(client, pipeline, monkeypatch):
    async def explode(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(pipeline, "upload", explode)

    response = post_form(client, "/api/upload/artistic", files=[image_part()])

    assert response.status_code == 500
    assert response.json()["error"] == "Internal server error"


def test_rate_limit(client, limiter):
    limiter.max_requests = 2
    headers = {"x-forwarded-for": "203.0.113.7"}

    statuses = [
        post_form(client, "/api/upload/artistic", files=[image_part()], headers=headers).status_code
        for _ in range(3)
    ]

    assert statuses == [200, 200, 429]
    other = post_form(client, "/api/upload/artistic", files=[image_part()], headers={"x-forwarded-for": "198.51.100.1"})
    assert other.status_code == 200


def test_method_not_allowed(client):
    response = client.get("/api/upload/artistic")

    assert response.status_code == 405
    assert response.json() == {
        "success": False,
        "error": "Method not allowed",
        "details": "Only POST requests are allowed",
    }


def test_options_preflight(client):
    assert client.options("/api/upload/about/profile").status_code == 200
    assert client.options("/api/upload").status_code == 200


def test_batch_upload(client):
    files = [
        image_part("one.jpg"),
        image_part("two.png", "image/png", make_image_bytes(fmt="PNG")),
        image_part("three.gif", "image/gif", b"GIF89a"),
    ]

    response = post_form(client, "/api/upload/photoshoot/batch", files=files)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["totalUploaded"] == 2
    assert data["totalFailed"] == 1
    assert data["failed"][0]["filename"] == "three.gif"


def test_batch_without_files(client):
    response = post_form(client, "/api/upload/about/profile/batch", fields={"keepOriginal": "true"})

    assert response.status_code == 400
    assert response.json()["error"] == "No files uploaded"
