from ocr_service.ocr.repair.normalize import GROUP_SEPARATOR, normalize, strip_diagnostics


class TestStripDiagnostics:
    def test_resolution_warning_removed(self):
        raw = "Warning: Invalid resolution 0 dpi. Using 70 instead.\nMENU"
        assert strip_diagnostics(raw).strip() == "MENU"

    def test_estimating_resolution_removed(self):
        assert strip_diagnostics("Estimating resolution as 412").strip() == ""

    def test_generic_error_line_removed(self):
        assert "Error" not in strip_diagnostics("Error: could not open\n커피")


class TestNormalize:
    def test_warning_then_text(self):
        raw = "Warning: Invalid resolution 300 dpi. Using 70 instead.\nHELLO"
        assert normalize(raw) == "HELLO"

    def test_short_lines_grouped_before_long_line(self):
        assert normalize("a\nb\nLongLineHere") == "a b | LongLineHere"

    def test_long_line_flushes_then_new_group(self):
        assert normalize("LongLineHere\na\nb") == "LongLineHere | a b"

    def test_single_line_returned_verbatim(self):
        assert normalize("   맥도날드 강남역점   \n\n") == "맥도날드 강남역점"

    def test_empty_and_diagnostics_only(self):
        assert normalize("") == ""
        assert normalize("\n  \n") == ""
        assert normalize("Estimating resolution as 300\n") == ""

    def test_all_short_lines_form_one_unit(self):
        assert normalize("빅맥\n세트\n5,500원") == "빅맥 세트 5,500원"

    def test_threshold_is_configurable(self):
        assert normalize("abcd\nab", short_line_max=3) == "abcd" + GROUP_SEPARATOR + "ab"
        assert normalize("abcd\nab") == "abcd ab"

    def test_ten_chars_still_short(self):
        ten = "0123456789"
        eleven = "0123456789X"
        assert normalize(f"{ten}\n{ten}") == f"{ten} {ten}"
        assert normalize(f"{eleven}\n{ten}") == f"{eleven} | {ten}"
