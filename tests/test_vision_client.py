"""Azure vision client request building and error mapping."""

import io
import json
import urllib.error
import urllib.request

import pytest

from pantry_vision.vision.azure_client import AzureVisionClient, VisionServiceError, client_from_config


class _FakeResponse:
    def __init__(self, body: bytes):
        self.body = body

    def read(self):
        return self.body

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


@pytest.fixture
def client():
    return AzureVisionClient("https://vision.example.com/", "secret")


class TestAzureVisionClient:
    def test_build_url(self, client):
        url = client.build_url()
        assert url.startswith("https://vision.example.com/computervision/imageanalysis:analyze?")
        assert "api-version=2023-10-01" in url
        assert "features=tags%2Cobjects%2CdenseCaptions" in url
        assert "model-version=latest" in url

    def test_analyze_file_posts_bytes(self, client, tmp_path, monkeypatch):
        image = tmp_path / "photo.jpg"
        image.write_bytes(b"\xff\xd8fake")
        seen = {}

        def fake_urlopen(req, timeout):
            seen["req"] = req
            seen["timeout"] = timeout
            body = {"tagsResult": {"values": [{"name": "banana", "confidence": 0.97}]}}
            return _FakeResponse(json.dumps(body).encode())

        monkeypatch.setattr(urllib.request, "urlopen", fake_urlopen)
        signal = client.analyze_file(image)

        req = seen["req"]
        assert req.get_method() == "POST"
        assert req.data == b"\xff\xd8fake"
        assert req.get_header("Ocp-apim-subscription-key") == "secret"
        assert req.get_header("Content-type") == "application/octet-stream"
        assert seen["timeout"] == 30.0
        assert signal.tags[0].name == "banana"

    def test_http_error_becomes_vision_service_error(self, client, monkeypatch):
        def fake_urlopen(req, timeout):
            raise urllib.error.HTTPError(req.full_url, 401, "Unauthorized", {}, io.BytesIO(b"bad key"))

        monkeypatch.setattr(urllib.request, "urlopen", fake_urlopen)
        with pytest.raises(VisionServiceError) as info:
            client.analyze_bytes(b"img")
        assert info.value.status == 401
        assert "bad key" in str(info.value)

    def test_invalid_json(self, client, monkeypatch):
        monkeypatch.setattr(urllib.request, "urlopen", lambda req, timeout: _FakeResponse(b"<html>"))
        with pytest.raises(VisionServiceError, match="invalid JSON"):
            client.analyze_bytes(b"img")

    def test_unreadable_image(self, client, tmp_path):
        with pytest.raises(VisionServiceError, match="Cannot read image"):
            client.analyze_file(tmp_path / "missing.jpg")

    def test_with_features(self, client):
        crop_client = client.with_features(["tags"])
        assert "features=tags&" in crop_client.build_url()
        assert crop_client.key == "secret"


class TestClientFromConfig:
    def test_missing_credentials(self):
        with pytest.raises(VisionServiceError, match="credentials"):
            client_from_config({"vision": {"endpoint": None, "key": None}})

    def test_builds_from_section(self):
        built = client_from_config(
            {"vision": {"endpoint": "https://x", "key": "k", "features": ["tags"], "timeout": 5}}
        )
        assert built.features == ("tags",)
        assert built.timeout == 5.0
