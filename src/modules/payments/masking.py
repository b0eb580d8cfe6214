"""Masking of PIX keys for unauthenticated booking pages."""

from __future__ import annotations

import re

from src.shared.enums import PixKeyType

_NON_DIGITS = re.compile(r"\D")
_CPF_SHAPE = re.compile(r"^\d{3}\.?\d{3}\.?\d{3}-?\d{2}$")
_CNPJ_SHAPE = re.compile(r"^\d{2}\.?\d{3}\.?\d{3}/?\d{4}-?\d{2}$")
_PHONE_SHAPE = re.compile(r"^\+?[\d\s().-]+$")

MASK = "****"


def mask_pix_key(key: str | None, key_type: PixKeyType | str | None) -> str:
    """Return a display-safe version of ``key``.

    Never raises: a key that does not match the shape of its declared type is
    masked with the generic rule instead.
    """
    raw = (key or "").strip()
    if not raw:
        return MASK

    kind = PixKeyType.coerce(key_type)
    masker = _MASKERS.get(kind) if kind else None
    masked = masker(raw) if masker else None
    return masked if masked is not None else _mask_random(raw)


def _mask_cpf(raw: str) -> str | None:
    if not _CPF_SHAPE.match(raw):
        return None
    digits = _NON_DIGITS.sub("", raw)
    return f"{digits[:3]}.***.***-{digits[-2:]}"


def _mask_cnpj(raw: str) -> str | None:
    if not _CNPJ_SHAPE.match(raw):
        return None
    digits = _NON_DIGITS.sub("", raw)
    return f"{digits[:2]}.***.***/****-{digits[-2:]}"


def _mask_email(raw: str) -> str | None:
    local, sep, domain = raw.rpartition("@")
    if not sep or not local or not domain:
        return None
    return f"{local[:2]}***@{domain}"


def _mask_phone(raw: str) -> str | None:
    if not _PHONE_SHAPE.match(raw):
        return None
    digits = _NON_DIGITS.sub("", raw)
    if len(digits) in (12, 13) and digits.startswith("55"):
        digits = digits[2:]
    if len(digits) not in (10, 11):
        return None
    area, subscriber = digits[:2], digits[2:]
    hidden_prefix = "*" * (len(subscriber) - 4)
    return f"({area}) {hidden_prefix}-**{subscriber[-2:]}"


def _mask_random(raw: str) -> str:
    if len(raw) <= 4:
        return MASK
    return f"{MASK}{raw[-4:]}"


_MASKERS = {
    PixKeyType.CPF: _mask_cpf,
    PixKeyType.CNPJ: _mask_cnpj,
    PixKeyType.EMAIL: _mask_email,
    PixKeyType.PHONE: _mask_phone,
}
