import pytest

from fakes import FakeEngine, blank_image, boxed_image, png_bytes
from ocr_service.config import DetectorConfig, FilterConfig, Settings
from ocr_service.errors import ImageDecodeError
from ocr_service.ocr import ConsolidationPipeline, PipelineOptions, TextElement, make_pipeline
from ocr_service.ocr.recognize import build_ladder

OPTIONS = PipelineOptions(
    full_ladder=build_ladder([3, 6], ["kor", "eng"]),
    region_ladder=build_ladder([8, 7], ["kor", "eng"]),
    detector=DetectorConfig(),
    filters=FilterConfig(),
)


class TestConsolidationPipeline:
    def test_blank_image_yields_nothing(self):
        engine = FakeEngine(default="")
        assert ConsolidationPipeline(engine, OPTIONS).extract_text(png_bytes(blank_image())) == []
        # whole image only: two rungs, no regions on a blank canvas
        assert [c[1].psm for c in engine.calls] == [3, 6]

    def test_whole_image_text_at_center(self):
        engine = FakeEngine({3: "맥도날드 강남역점"})
        out = ConsolidationPipeline(engine, OPTIONS).extract_from_image(blank_image(400, 300))
        assert out == [TextElement("맥도날드 강남역점", 200, 150)]

    def test_regions_use_region_ladder_and_center(self):
        engine = FakeEngine({3: "", 6: "", 8: "", 7: "빅맥세트"})
        img = boxed_image([(50, 100, 120, 20)])
        out = ConsolidationPipeline(engine, OPTIONS).extract_from_image(img)
        assert len(out) == 1
        el = out[0]
        assert el.text == "빅맥세트"
        assert 50 <= el.x <= 170 and 100 <= el.y <= 120
        assert [c[1].psm for c in engine.calls] == [3, 6, 8, 7]

    def test_duplicates_collapse_to_first(self):
        engine = FakeEngine(default="Coffee")
        img = boxed_image([(40, 40, 120, 20), (200, 220, 150, 24)])
        out = ConsolidationPipeline(engine, OPTIONS).extract_from_image(img)
        assert out == [TextElement("Coffee", 200, 150)]

    def test_noise_filtered_and_coordinates_in_bounds(self):
        engine = FakeEngine({3: "~~~", 6: "", 8: "메뉴판"})
        img = boxed_image([(40, 40, 120, 20), (200, 220, 150, 24)])
        out = ConsolidationPipeline(engine, OPTIONS).extract_from_image(img)
        assert out and all(e.text == "메뉴판" for e in out)
        for e in out:
            assert 0 <= e.x < 400 and 0 <= e.y < 300
        keys = [e.text.strip().lower() for e in out]
        assert len(keys) == len(set(keys))

    def test_diagnostics_never_surface(self):
        engine = FakeEngine({3: "Warning: Invalid resolution 0 dpi. Using 70 instead.\nHELLO"})
        out = ConsolidationPipeline(engine, OPTIONS).extract_from_image(blank_image())
        assert [e.text for e in out] == ["HELLO"]

    @pytest.mark.parametrize("payload", [b"", b"not an image", b"\x89PNG\r\n\x1a\n"])
    def test_undecodable_upload(self, payload):
        with pytest.raises(ImageDecodeError):
            ConsolidationPipeline(FakeEngine(), OPTIONS).extract_text(payload)


class TestMakePipeline:
    def test_options_follow_settings(self, monkeypatch):
        monkeypatch.setenv("OCR_FULL_PSM_LADDER", "6")
        monkeypatch.setenv("OCR_LANGUAGES", "eng")
        p = make_pipeline(Settings.from_env(), FakeEngine())
        assert [(s.psm, s.lang) for s in p.options.full_ladder] == [(6, "eng")]
        assert isinstance(p.engine, FakeEngine)
