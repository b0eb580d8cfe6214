"""Static PIX "BR Code" payload encoding (EMV-QR merchant-presented mode).

The payload is a flat run of ``TAG(2) + LENGTH(2) + VALUE`` fields. Some fields
hold a nested run of the same shape. The last field (``63``) is a
CRC-16/CCITT-FALSE checksum computed over everything before it, including its
own ``6304`` tag/length prefix.
"""

from __future__ import annotations

import re
import time
import unicodedata
from collections.abc import Callable

from src.core.exceptions import MissingPixIdentity
from src.modules.payments.pricing import PixIdentity
from src.shared.enums import PixKeyType

ID_PAYLOAD_FORMAT = "00"
ID_MERCHANT_ACCOUNT = "26"
ID_MERCHANT_CATEGORY = "52"
ID_CURRENCY = "53"
ID_AMOUNT = "54"
ID_COUNTRY = "58"
ID_MERCHANT_NAME = "59"
ID_MERCHANT_CITY = "60"
ID_ADDITIONAL_DATA = "62"
ID_CRC = "63"

ID_GUI = "00"
ID_KEY = "01"
ID_INFO = "02"
ID_REFERENCE_LABEL = "05"

PIX_GUI = "BR.GOV.BCB.PIX"
PAYLOAD_FORMAT = "01"
MERCHANT_CATEGORY = "0000"
CURRENCY_BRL = "986"
COUNTRY_BR = "BR"
DEFAULT_CITY = "BRASIL"
DEFAULT_TXID_PREFIX = "BELA"

MAX_FIELD_LENGTH = 99
MAX_NAME_LENGTH = 25
MAX_CITY_LENGTH = 15
MAX_TXID_LENGTH = 25
# 26 = "0014BR.GOV.BCB.PIX" + "01" + LL + key, all within 99 chars.
MAX_KEY_LENGTH = MAX_FIELD_LENGTH - (4 + len(PIX_GUI)) - 4

CRC_PREFIX = ID_CRC + "04"

_NOT_ALNUM_SPACE = re.compile(r"[^A-Za-z0-9 ]")
_NOT_ALNUM = re.compile(r"[^A-Za-z0-9]")
_NON_DIGITS = re.compile(r"\D")
_BASE36 = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def encode_payload(
    identity: PixIdentity,
    amount_minor_units: int,
    description: str | None = None,
    *,
    txid: str | None = None,
    txid_prefix: str = DEFAULT_TXID_PREFIX,
    clock: Callable[[], float] = time.time,
) -> str:
    """Build the "copia e cola" text for a static PIX charge.

    Field ``54`` is left out entirely when the amount is zero. The reference
    label comes from ``txid`` or, when omitted, from ``txid_prefix`` plus the
    base-36 epoch milliseconds read from ``clock``.
    """
    key = normalize_pix_key(identity.key or "", identity.key_type)
    if not key:
        raise MissingPixIdentity("PIX key is not configured")
    if len(key) > MAX_KEY_LENGTH or not key.isascii():
        raise MissingPixIdentity(f"PIX key must be ASCII and at most {MAX_KEY_LENGTH} characters")
    name = sanitize_text(identity.holder_name or "").upper()[:MAX_NAME_LENGTH]
    if not name:
        raise MissingPixIdentity("PIX holder name is not configured")

    merchant_account = _tlv(ID_GUI, PIX_GUI) + _tlv(ID_KEY, key)
    info = sanitize_text(description or "")
    room = MAX_FIELD_LENGTH - len(merchant_account) - 4
    if info and room > 0:
        merchant_account += _tlv(ID_INFO, info[:room])

    city = sanitize_text(identity.city or "").upper()[:MAX_CITY_LENGTH] or DEFAULT_CITY
    reference = _reference_label(txid, txid_prefix, clock)

    parts = [
        _tlv(ID_PAYLOAD_FORMAT, PAYLOAD_FORMAT),
        _tlv(ID_MERCHANT_ACCOUNT, merchant_account),
        _tlv(ID_MERCHANT_CATEGORY, MERCHANT_CATEGORY),
        _tlv(ID_CURRENCY, CURRENCY_BRL),
    ]
    if amount_minor_units > 0:
        parts.append(_tlv(ID_AMOUNT, format_amount(amount_minor_units)))
    parts += [
        _tlv(ID_COUNTRY, COUNTRY_BR),
        _tlv(ID_MERCHANT_NAME, name),
        _tlv(ID_MERCHANT_CITY, city),
        _tlv(ID_ADDITIONAL_DATA, _tlv(ID_REFERENCE_LABEL, reference)),
    ]

    body = "".join(parts) + CRC_PREFIX
    return body + crc16_ccitt(body)


def crc16_ccitt(data: str) -> str:
    """CRC-16/CCITT-FALSE (poly 0x1021, init 0xFFFF) as four uppercase hex digits."""
    crc = 0xFFFF
    for byte in data.encode("ascii"):
        crc ^= byte << 8
        for _ in range(8):
            if crc & 0x8000:
                crc = ((crc << 1) ^ 0x1021) & 0xFFFF
            else:
                crc = (crc << 1) & 0xFFFF
    return f"{crc:04X}"


def format_amount(amount_minor_units: int) -> str:
    reais, centavos = divmod(amount_minor_units, 100)
    return f"{reais}.{centavos:02d}"


def sanitize_text(value: str) -> str:
    """Strip diacritics and keep only ASCII letters, digits and spaces."""
    decomposed = unicodedata.normalize("NFD", value)
    without_marks = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _NOT_ALNUM_SPACE.sub("", without_marks).strip()


def normalize_pix_key(key: str, key_type: PixKeyType | str | None) -> str:
    """Render a key the way PIX directories store it."""
    key = key.strip()
    kind = PixKeyType.coerce(key_type)
    if kind in (PixKeyType.CPF, PixKeyType.CNPJ):
        return _NON_DIGITS.sub("", key)
    if kind is PixKeyType.PHONE:
        if key.startswith("+"):
            return "+" + _NON_DIGITS.sub("", key)
        digits = _NON_DIGITS.sub("", key)
        if len(digits) in (12, 13) and digits.startswith("55"):
            return "+" + digits
        return "+55" + digits if digits else ""
    if kind is PixKeyType.EMAIL:
        return key.lower()
    return key


def parse_tlv(text: str) -> list[tuple[str, str]]:
    """Split a run of TLV fields into ``(tag, value)`` pairs."""
    fields: list[tuple[str, str]] = []
    pos = 0
    while pos < len(text):
        header = text[pos:pos + 4]
        if len(header) < 4 or not header.isdigit():
            raise ValueError(f"Malformed TLV header at offset {pos}: {header!r}")
        tag, length = header[:2], int(header[2:])
        value = text[pos + 4:pos + 4 + length]
        if len(value) != length:
            raise ValueError(f"Field {tag} at offset {pos} is truncated")
        fields.append((tag, value))
        pos += 4 + length
    return fields


def decode_payload(text: str) -> dict[str, str | dict[str, str]]:
    """Map top-level tags to values; templates ``26`` and ``62`` are expanded."""
    decoded: dict[str, str | dict[str, str]] = {}
    for tag, value in parse_tlv(text):
        if tag in (ID_MERCHANT_ACCOUNT, ID_ADDITIONAL_DATA):
            decoded[tag] = dict(parse_tlv(value))
        else:
            decoded[tag] = value
    return decoded


def verify_crc(text: str) -> bool:
    if len(text) < 8 or text[-8:-4] != CRC_PREFIX:
        return False
    return crc16_ccitt(text[:-4]) == text[-4:].upper()


def _tlv(tag: str, value: str) -> str:
    if len(value) > MAX_FIELD_LENGTH:
        raise ValueError(f"Field {tag} value exceeds {MAX_FIELD_LENGTH} characters")
    return f"{tag}{len(value):02d}{value}"


def _reference_label(txid: str | None, prefix: str, clock: Callable[[], float]) -> str:
    if txid is None:
        txid = _NOT_ALNUM.sub("", prefix) + _to_base36(int(clock() * 1000))
    cleaned = _NOT_ALNUM.sub("", txid)[:MAX_TXID_LENGTH]
    return cleaned or "***"


def _to_base36(number: int) -> str:
    if number <= 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))
