from __future__ import annotations

import unicodedata

import pytest

from region_crawler.engine.text import capitalize_except_roman, is_roman_numeral


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("bar III", "Bar III"),
        ("KOTA ADM. JAKARTA PUSAT", "Kota Adm Jakarta Pusat"),
        ("DI YOGYAKARTA", "DI Yogyakarta"),
        ("  kampung   baru  ", "Kampung Baru"),
        ("Pulau Ii", "Pulau II"),
        ("Séréal", "Séréal"),
        ("ÉMPAT LAWANG", "Émpat Lawang"),
        ("sungai penuh, kota", "Sungai Penuh Kota"),
        ("kec. bone-bone", "Kec Bone-bone"),
        ("", ""),
    ],
)
def test_capitalize_except_roman(raw: str, expected: str) -> None:
    assert capitalize_except_roman(raw) == expected


@pytest.mark.parametrize(
    ("token", "expected"),
    [("IV", True), ("xii", True), ("MCMXCIV", True), ("ACEH", False), ("", False)],
)
def test_is_roman_numeral(token: str, expected: bool) -> None:
    assert is_roman_numeral(token) is expected


def test_capitalize_keeps_accents_in_composed_form() -> None:
    result = capitalize_except_roman("Kécamatan BAÑOS")
    assert result == "Kécamatan Baños"
    assert result == unicodedata.normalize("NFC", result)
