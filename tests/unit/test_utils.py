"""Tests for utility helpers."""

import pytest

from pdf_chat.utils import (
    clean_text,
    generate_point_id,
    make_preview,
    measure_time,
    validate_file_type,
)


@pytest.mark.unit
def test_clean_text_keeps_paragraph_breaks():
    raw = "First  line\t here \r\nsecond line\n\n\n\nNext   paragraph.  "

    assert clean_text(raw) == "First line here\nsecond line\n\nNext paragraph."


@pytest.mark.unit
def test_clean_text_handles_empty_input():
    assert clean_text("") == ""
    assert clean_text(None) == ""


@pytest.mark.unit
@pytest.mark.parametrize(
    "text, expected",
    [
        ("short", "short"),
        ("x" * 150, "x" * 150),
        ("x" * 151, "x" * 150 + "..."),
    ],
)
def test_make_preview(text, expected):
    assert make_preview(text, 150) == expected


@pytest.mark.unit
@pytest.mark.parametrize(
    "filename, content_type, allowed",
    [
        ("report.pdf", None, True),
        ("REPORT.PDF", None, True),
        ("report", "application/pdf", True),
        ("notes.txt", "text/plain", False),
        ("", None, False),
    ],
)
def test_validate_file_type(filename, content_type, allowed):
    assert validate_file_type(filename, content_type) is allowed


@pytest.mark.unit
def test_point_id_is_stable_per_source_and_index():
    assert generate_point_id("a.pdf", 0) == generate_point_id("a.pdf", 0)
    assert generate_point_id("a.pdf", 0) != generate_point_id("a.pdf", 1)
    assert generate_point_id("a.pdf", 0) != generate_point_id("b.pdf", 0)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_measure_time_wraps_coroutines():
    @measure_time
    async def answer():
        return 42

    assert answer.__name__ == "answer"
    assert await answer() == 42


@pytest.mark.unit
def test_measure_time_wraps_functions():
    @measure_time
    def answer():
        return 42

    assert answer() == 42
