import pytest
from fastapi.testclient import TestClient

from fakes import FakeEngine, FakeLLM, blank_image, boxed_image, png_bytes
from ocr_service.api_main import create_app
from ocr_service.config import Settings
from ocr_service.errors import SemanticServiceError
from ocr_service.ocr import make_pipeline


class BrokenPipeline:
    engine = FakeEngine()

    def extract_text(self, data):
        raise RuntimeError("engine crashed")


@pytest.fixture
def settings(monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "test")
    return Settings.from_env()


def _client(settings, engine=None, llm=None, pipeline=None):
    pipeline = pipeline or make_pipeline(settings, engine or FakeEngine())
    return TestClient(create_app(settings, pipeline=pipeline, llm=llm or FakeLLM()))


def _upload(img):
    return {"image": ("menu.png", png_bytes(img), "image/png")}


class TestServiceRoutes:
    def test_health(self, settings):
        with _client(settings) as client:
            r = client.get("/health")
        assert r.status_code == 200
        assert r.json() == {"status": "ok", "ocr": True}

    def test_root_reports_env(self, settings):
        with _client(settings) as client:
            assert client.get("/").json()["env"] == "test"

    def test_cors_open(self, settings):
        with _client(settings) as client:
            r = client.get("/health", headers={"Origin": "http://example.com"})
        assert r.headers.get("access-control-allow-origin") == "*"


class TestImageExtract:
    def test_text_with_coordinates(self, settings):
        engine = FakeEngine({3: "맥도냘드"})
        with _client(settings, engine) as client:
            r = client.post("/image/extract", files=_upload(blank_image(400, 300)))
        assert r.status_code == 200
        assert r.json() == {
            "success": True,
            "text_list": [{"text": "맥도냘드", "x": 200, "y": 150}],
            "total_count": 1,
        }

    def test_no_text_is_success(self, settings):
        with _client(settings) as client:
            r = client.post("/image/extract", files=_upload(blank_image()))
        body = r.json()
        assert r.status_code == 200
        assert body["success"] is True
        assert body["text_list"] == [] and body["total_count"] == 0

    def test_missing_image(self, settings):
        with _client(settings) as client:
            r = client.post("/image/extract")
        assert r.status_code == 400
        assert r.json() == {"success": False, "text_list": [], "total_count": 0, "message": "Image file required"}

    def test_invalid_type(self, settings):
        with _client(settings) as client:
            r = client.post("/image/extract?type=number", files=_upload(blank_image()))
        assert r.status_code == 400
        assert r.json()["message"] == "type parameter must be 'store' or 'food'"

    def test_corrupt_image(self, settings):
        with _client(settings) as client:
            r = client.post("/image/extract", files={"image": ("x.png", b"garbage", "image/png")})
        assert r.status_code == 400
        body = r.json()
        assert body["success"] is False and body["total_count"] == 0
        assert body["message"].startswith("Invalid image")

    def test_ocr_failure(self, settings):
        with _client(settings, pipeline=BrokenPipeline()) as client:
            r = client.post("/image/extract", files=_upload(blank_image()))
        assert r.status_code == 500
        assert r.json()["message"] == "OCR failed"

    def test_store_filter_keeps_coordinates(self, settings):
        engine = FakeEngine({3: "맥도냘드"})
        llm = FakeLLM(answer="맥도날드")
        with _client(settings, engine, llm) as client:
            r = client.post("/image/extract?type=store", files=_upload(blank_image(400, 300)))
        assert r.status_code == 200
        assert r.json()["text_list"] == [{"text": "맥도날드", "x": 200, "y": 150}]
        assert '"맥도냘드"' in llm.prompts[0]

    def test_filter_none_answer(self, settings):
        engine = FakeEngine({3: "5,500원"})
        with _client(settings, engine, FakeLLM(answer="NONE")) as client:
            r = client.post("/image/extract?type=food", files=_upload(blank_image()))
        assert r.status_code == 200
        assert r.json()["total_count"] == 0

    def test_empty_ocr_skips_model(self, settings):
        llm = FakeLLM(answer="콜라")
        with _client(settings, FakeEngine(), llm) as client:
            r = client.post("/image/extract?type=food", files=_upload(blank_image()))
        assert r.json()["total_count"] == 0
        assert llm.prompts == []

    @pytest.mark.parametrize("kind,message", [("store", "Store name filtering failed"), ("food", "Food name filtering failed")])
    def test_model_failure(self, settings, kind, message):
        engine = FakeEngine({3: "맥도날드"})
        llm = FakeLLM(error=SemanticServiceError("HTTP 401"))
        with _client(settings, engine, llm) as client:
            r = client.post(f"/image/extract?type={kind}", files=_upload(boxed_image([(50, 100, 120, 20)])))
        assert r.status_code == 500
        assert r.json() == {"success": False, "text_list": [], "total_count": 0, "message": message}


class TestTextExtract:
    def test_result(self, settings):
        llm = FakeLLM(answer="4")
        with _client(settings, llm=llm) as client:
            r = client.post("/text/extract?type=number", json={"text": "아 그 잠깐만 4번 어 4번"})
        assert r.status_code == 200
        assert r.json() == {"result": "4"}
        assert "아 그 잠깐만 4번 어 4번" in llm.prompts[0]

    def test_none_is_passed_through(self, settings):
        with _client(settings, llm=FakeLLM(answer="NONE")) as client:
            r = client.post("/text/extract?type=food", json={"text": "그냥 배고파"})
        assert r.json() == {"result": "NONE"}

    def test_type_required(self, settings):
        with _client(settings) as client:
            r = client.post("/text/extract", json={"text": "교촌"})
        assert r.status_code == 400
        assert r.json() == {"error": "type query parameter is required"}

    def test_type_invalid(self, settings):
        with _client(settings) as client:
            r = client.post("/text/extract?type=drink", json={"text": "콜라"})
        assert r.status_code == 400
        assert r.json() == {"error": "type must be 'store', 'number', or 'food'"}

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"content": b"not json", "headers": {"content-type": "application/json"}},
            {"json": ["text"]},
            {"json": {}},
            {"json": {"text": ""}},
        ],
    )
    def test_bad_body(self, settings, kwargs):
        llm = FakeLLM(answer="x")
        with _client(settings, llm=llm) as client:
            r = client.post("/text/extract?type=store", **kwargs)
        assert r.status_code == 400
        assert "error" in r.json()
        assert llm.prompts == []

    def test_model_failure(self, settings):
        llm = FakeLLM(error=SemanticServiceError("OPENAI_API_KEY environment variable not set"))
        with _client(settings, llm=llm) as client:
            r = client.post("/text/extract?type=store", json={"text": "교촌"})
        assert r.status_code == 500
        assert r.json() == {"error": "OPENAI_API_KEY environment variable not set"}


class TestLifespan:
    def test_injected_client_not_closed(self, settings):
        llm = FakeLLM()
        with _client(settings, llm=llm):
            pass
        assert llm.closed is False
