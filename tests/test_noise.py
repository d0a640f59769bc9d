import pytest

from ocr_service.config import FilterConfig
from ocr_service.ocr.repair.noise import is_repeating_pattern, is_valid, keep, rejection_reason
from ocr_service.ocr.schema import TextElement


class TestRejectionRules:
    @pytest.mark.parametrize("text", ["", "   ", "\n"])
    def test_empty(self, text):
        assert rejection_reason(text) == "empty"

    @pytest.mark.parametrize("text", ["A", "ab", "맥", "ok"])
    def test_short_not_significant(self, text):
        assert rejection_reason(text) == "short"

    @pytest.mark.parametrize("text", ["7", "42", "안", "OK", "IN", " NO "])
    def test_significant_short_kept(self, text):
        assert is_valid(text)

    def test_long_digit_strings_kept(self):
        assert is_valid("0212345678")

    @pytest.mark.parametrize("text", ["~~~", "...!", "-- --"])
    def test_symbols_only(self, text):
        assert rejection_reason(text) == "symbols-only"

    @pytest.mark.parametrize("text", ["aaaa", "ababab", "123123123", "하하하"])
    def test_repeating(self, text):
        assert rejection_reason(text) == "repeating"

    def test_overlong(self):
        text = "".join(f"item{i} " for i in range(40))
        assert rejection_reason(text) == "overlong"
        assert is_valid(text, FilterConfig(max_text_length=400))

    def test_ordinary_text_kept(self):
        assert rejection_reason("빅맥세트 5,500원") is None


class TestRepeatingPattern:
    def test_requires_three_chars(self):
        assert not is_repeating_pattern("aa")

    def test_partial_repeat_is_not_pattern(self):
        assert not is_repeating_pattern("abcab")
        assert not is_repeating_pattern("abab")
        assert not is_repeating_pattern("123123")  # two repeats only


class TestKeep:
    def test_keeps_coordinates_and_order(self):
        els = [TextElement("A", 1, 1), TextElement("아메리카노", 5, 6), TextElement("~~~", 2, 2), TextElement("7", 9, 9)]
        assert keep(els) == [TextElement("아메리카노", 5, 6), TextElement("7", 9, 9)]

    def test_idempotent(self):
        els = [TextElement(t, i, i) for i, t in enumerate(["A", "커피", "ababab", "OK", "메뉴판", "--"])]
        once = keep(els)
        assert keep(once) == once
