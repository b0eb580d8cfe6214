import re

import pytest

from src.modules.payments.masking import mask_pix_key
from src.shared.enums import PixKeyType


@pytest.mark.parametrize(
    ("key", "key_type", "expected"),
    [
        ("123.456.789-00", PixKeyType.CPF, "123.***.***-00"),
        ("12345678900", "CPF", "123.***.***-00"),
        ("12.345.678/0001-90", PixKeyType.CNPJ, "12.***.***/****-90"),
        ("12345678000190", PixKeyType.CNPJ, "12.***.***/****-90"),
        ("financeiro@studio.com", PixKeyType.EMAIL, "fi***@studio.com"),
        ("(11) 98765-4399", PixKeyType.PHONE, "(11) *****-**99"),
        ("+55 11 98765-4399", PixKeyType.PHONE, "(11) *****-**99"),
        ("1134567899", PixKeyType.PHONE, "(11) ****-**99"),
        ("123e4567-e12b-12d1-a456-426655440000", PixKeyType.RANDOM, "****0000"),
    ],
)
def test_mask_by_type(key, key_type, expected):
    assert mask_pix_key(key, key_type) == expected


@pytest.mark.parametrize(
    ("key", "key_type", "expected"),
    [
        ("not-a-cpf-value", PixKeyType.CPF, "****alue"),
        ("no-at-sign", PixKeyType.EMAIL, "****sign"),
        ("12345", PixKeyType.PHONE, "****2345"),
        ("abcdefgh", "unknown", "****efgh"),
        ("abcdefgh", None, "****efgh"),
        ("abcd", PixKeyType.RANDOM, "****"),
        ("", PixKeyType.CPF, "****"),
        (None, None, "****"),
        ("   ", PixKeyType.EMAIL, "****"),
    ],
)
def test_mask_falls_back_without_raising(key, key_type, expected):
    assert mask_pix_key(key, key_type) == expected


def _runs(text, length=5):
    return {text[i:i + length] for i in range(len(text) - length + 1)}


@pytest.mark.parametrize(
    ("key", "key_type"),
    [
        ("123.456.789-00", PixKeyType.CPF),
        ("12345678900", PixKeyType.CPF),
        ("12.345.678/0001-90", PixKeyType.CNPJ),
        ("12345678000190", PixKeyType.CNPJ),
        ("(11) 98765-4399", PixKeyType.PHONE),
        ("+55 11 98765-4399", PixKeyType.PHONE),
        ("1134567899", PixKeyType.PHONE),
        ("123e4567-e12b-12d1-a456-426655440000", PixKeyType.RANDOM),
        ("not-a-cpf-value", PixKeyType.CPF),
        ("no-at-sign", PixKeyType.EMAIL),
        ("12345", PixKeyType.PHONE),
        ("abcdefgh", "unknown"),
    ],
)
def test_masked_key_never_shows_more_than_four_characters_in_a_row(key, key_type):
    # Emails keep their domain visible, so they are not listed here.
    masked = mask_pix_key(key, key_type)
    digits = re.sub(r"\D", "", key)
    assert "*" in masked
    assert not any(run in masked for run in _runs(key))
    assert not any(run in masked for run in _runs(digits))
