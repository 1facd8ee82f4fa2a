"""Tests for passage normalization and FNV-1a digests."""

import pytest

from cluekit.content.digest import (
    FNV_OFFSET_BASIS,
    MASK64,
    digest64,
    digest_to_hex,
    fnv1a64,
    hex_to_digest,
    normalize,
    segment_digest,
    segment_preview,
    segment_text,
)
from cluekit.content.segments import (
    DecisionSegment,
    DialogueSegment,
    HeaderSegment,
    NarrationSegment,
    SystemSegment,
)


class TestNormalize:
    def test_strips_punctuation_and_whitespace(self):
        assert normalize("Hello, World!") == "helloworld"

    def test_fullwidth_folds(self):
        assert normalize("ＡＢＣ １２３") == "abc123"

    def test_cjk_punctuation(self):
        assert normalize("你好，世界。") == "你好世界"

    def test_symbols_removed(self):
        assert normalize("a+b=c $5 ★") == "abc5"

    def test_empty(self):
        assert normalize("") == ""


class TestFnv1a64:
    def test_empty_is_offset_basis(self):
        assert fnv1a64("") == FNV_OFFSET_BASIS

    def test_known_vectors(self):
        assert fnv1a64("a") == 0xAF63DC4C8601EC8C
        assert fnv1a64("foobar") == 0x85944171F73967E8

    def test_fits_64_bits(self):
        assert 0 <= fnv1a64("a fairly long passage " * 50) <= MASK64


class TestDigest64:
    def test_deterministic(self):
        s = "Doctor, the operation begins at dawn."
        assert digest64(s) == digest64(s)

    def test_ignores_formatting(self):
        assert digest64("Doctor,  the operation\nbegins at dawn.") == digest64(
            "doctor the operation begins at dawn"
        )

    def test_letter_change_differs(self):
        assert digest64("begins at dawn") != digest64("begins at down")


class TestHex:
    def test_round_trip(self):
        assert digest_to_hex(1) == "0000000000000001"
        assert hex_to_digest(digest_to_hex(0x1122334455667788)) == 0x1122334455667788

    def test_hex_ignores_noise(self):
        assert hex_to_digest("11-22 33") == 0x112233

    def test_empty_hex_is_zero(self):
        assert hex_to_digest("") == 0


class TestSegmentText:
    def test_dialogue_includes_speaker(self):
        assert segment_text(DialogueSegment("Amiya", "Doctor?")) == "Amiya Doctor?"

    def test_system_with_and_without_speaker(self):
        assert segment_text(SystemSegment("Alert", speaker="PRTS")) == "PRTS Alert"
        assert segment_text(SystemSegment("Alert")) == "Alert"

    def test_decision_joins_options(self):
        assert segment_text(DecisionSegment(("Yes", "No"))) == "Yes No"

    def test_header_has_no_text(self):
        assert segment_text(HeaderSegment("Chapter 1")) == ""

    def test_speaker_is_part_of_identity(self):
        a = segment_digest(DialogueSegment("Amiya", "Let's go."))
        b = segment_digest(DialogueSegment("Kal'tsit", "Let's go."))
        assert a != b


class TestSegmentPreview:
    def test_dialogue_first_line(self):
        seg = DialogueSegment("Amiya", "First  line\nsecond line")
        assert segment_preview(seg) == "Amiya: First line"

    def test_narration(self):
        assert segment_preview(NarrationSegment("  Rain falls.\nMore")) == "Rain falls."

    @pytest.mark.parametrize("seg", [HeaderSegment("Title"), DecisionSegment(("a", "b"))])
    def test_kinds_without_preview(self, seg):
        assert segment_preview(seg) == ""
