from __future__ import annotations

import logging
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

from presupuestos import constants
from presupuestos.constants import DEC2

log = logging.getLogger(__name__)


class NumberParseError(ValueError):
    """Raised in strict mode when a numeric field cannot be parsed."""

    def __init__(self, value, field: str | None = None):
        self.value = value
        self.field = field
        where = f" in field {field!r}" if field else ""
        super().__init__(f"Invalid number{where}: {value!r}")


def q2(x: Decimal) -> Decimal:
    return x.quantize(DEC2, rounding=ROUND_HALF_UP)


def _invalid(value, field: str | None, strict: bool | None) -> Decimal:
    if constants.STRICT_NUMBERS if strict is None else strict:
        raise NumberParseError(value, field)
    log.debug("Unparseable number %r (%s), using 0", value, field or "-")
    return Decimal("0")


def parse_number(value, *, field: str | None = None, strict: bool | None = None) -> Decimal:
    """Convert a Spanish-formatted number into :class:`Decimal`.

    ``"1.234,56"`` and ``"1234,56"`` both give ``Decimal("1234.56")``. A
    string without a comma is read with ``.`` as the decimal separator, so
    canonical values such as ``"121.00"`` parse back to themselves.
    Currency and percent signs as well as (non-breaking) spaces are ignored.

    ``None`` and empty strings are absent values and return ``0``. Any other
    unparseable input returns ``0`` unless ``strict`` is enabled (explicitly
    or through ``PRESUPUESTOS_STRICT_NUMBERS``), in which case
    :class:`NumberParseError` is raised.
    """
    if value is None or isinstance(value, bool):
        return Decimal("0") if value is None else _invalid(value, field, strict)

    if isinstance(value, Decimal):
        return value if value.is_finite() else _invalid(value, field, strict)

    if isinstance(value, (int, float)):
        try:
            d = Decimal(str(value))
        except InvalidOperation:
            return _invalid(value, field, strict)
        return d if d.is_finite() else _invalid(value, field, strict)

    txt = str(value)
    for ch in ("\xa0", " ", "€", "%"):
        txt = txt.replace(ch, "")
    if not txt:
        return Decimal("0")

    if "," in txt:
        txt = txt.replace(".", "").replace(",", ".")

    try:
        d = Decimal(txt)
    except InvalidOperation:
        return _invalid(value, field, strict)
    return d if d.is_finite() else _invalid(value, field, strict)


def to_canonical(value: Decimal) -> str:
    """Return ``value`` as a fixed 2-decimal string with a dot separator."""
    rounded = q2(value)
    if rounded == 0:
        rounded = Decimal("0.00")
    return format(rounded, "f")


def canonical(value, *, field: str | None = None, strict: bool | None = None) -> str:
    """Parse ``value`` and emit its canonical machine form (``"1234.56"``)."""
    return to_canonical(parse_number(value, field=field, strict=strict))


def format_es(value: Decimal, decimals: int = 2) -> str:
    """Format ``value`` for display: ``1234.5`` → ``"1.234,50"``."""
    step = Decimal(1).scaleb(-decimals)
    rounded = Decimal(value).quantize(step, rounding=ROUND_HALF_UP)
    txt = f"{rounded:,.{decimals}f}"
    return txt.replace(",", "\x00").replace(".", ",").replace("\x00", ".")


def format_eur(value: Decimal) -> str:
    """Format ``value`` as Spanish currency: ``4995`` → ``"4.995,00 €"``."""
    return f"{format_es(value)} €"
