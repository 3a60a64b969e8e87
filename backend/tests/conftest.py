import io

import pytest
from PIL import Image

from portfolio_upload.core.storage import StorageManager
from portfolio_upload.services.image_processor import ImageProcessor
from portfolio_upload.services.multipart_parser import ParsedFile
from portfolio_upload.services.upload_pipeline import UploadPipeline


class FakeBucket:
    def __init__(self, client, name):
        self.client = client
        self.name = name

    def upload(self, path, file, file_options=None):
        self.client.upload_calls.append((self.name, path))
        if self.name in self.client.failing_buckets:
            raise RuntimeError(f"bucket {self.name} unavailable")
        self.client.objects[(self.name, path)] = {"data": file, "options": file_options}
        return {"Key": f"{self.name}/{path}"}

    def get_public_url(self, path):
        return f"https://demo.supabase.co/storage/v1/object/public/{self.name}/{path}"

    def remove(self, paths):
        if self.name in self.client.failing_buckets:
            raise RuntimeError(f"bucket {self.name} unavailable")
        for path in paths:
            self.client.objects.pop((self.name, path), None)
        return []


class FakeStorageApi:
    def __init__(self, client):
        self.client = client

    def from_(self, bucket):
        return FakeBucket(self.client, bucket)


class FakeSupabase:
    """Stands in for supabase.Client; records every storage call."""

    def __init__(self):
        self.objects = {}
        self.upload_calls = []
        self.failing_buckets = set()
        self.storage = FakeStorageApi(self)


def make_image_bytes(width=64, height=48, fmt="JPEG", mode="RGB", color=(200, 40, 40)):
    image = Image.new(mode, (width, height), color)
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def fake_supabase():
    return FakeSupabase()


@pytest.fixture
def storage_manager(fake_supabase):
    return StorageManager(client=fake_supabase)


@pytest.fixture
def pipeline(storage_manager):
    return UploadPipeline(storage=storage_manager, processor=ImageProcessor())


@pytest.fixture
def jpeg_file():
    return ParsedFile(
        field_name="file",
        filename="Sunset at Lake.jpg",
        mime_type="image/jpeg",
        data=make_image_bytes(),
    )


@pytest.fixture
def png_file():
    return ParsedFile(
        field_name="file",
        filename="logo.PNG",
        mime_type="image/png",
        data=make_image_bytes(fmt="PNG", mode="RGBA", color=(0, 0, 255, 128)),
    )
