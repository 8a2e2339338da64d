"""Cash file reader.

Format, one entry per line (``#`` comments and blank lines ignored)::

    Cash.USD=12000
    Loan.HKD.M=-2530000
    Fund.EUR.E=500
    Retirement.P=0.5*retirement
"""

import logging
from pathlib import Path
from typing import Optional

from portfolio_helper.core.exceptions import ValidationError
from portfolio_helper.domain.models import CashEntry, PORTFOLIO_REF_CURRENCY

logger = logging.getLogger(__name__)

MARGIN_FLAG = "M"
EQUITY_FLAG = "E"


def parse_cash_line(line: str) -> Optional[CashEntry]:
    """
    Parse a single ``key=value`` line.

    Returns None for comments and blank lines.

    Raises:
        ValidationError: If the line is malformed.
    """
    trimmed = line.strip()
    if not trimmed or trimmed.startswith("#"):
        return None

    key, sep, value = trimmed.partition("=")
    if not sep:
        raise ValidationError(f"Cash line has no '=': {trimmed!r}")

    parts = [p.strip() for p in key.strip().split(".")]
    flags = set()
    while len(parts) > 2 and parts[-1].upper() in (MARGIN_FLAG, EQUITY_FLAG):
        flags.add(parts.pop().upper())
    if len(parts) < 2 or not parts[-1]:
        raise ValidationError(f"Cash key needs a currency suffix: {key.strip()!r}")

    currency = parts[-1].upper()
    label = ".".join(parts[:-1])
    value = value.strip()

    portfolio_ref = None
    if currency == PORTFOLIO_REF_CURRENCY:
        multiplier_text, star, ref = value.partition("*")
        if not star:
            multiplier_text, ref = "1", value
        portfolio_ref = ref.strip().lower()
        if not portfolio_ref:
            raise ValidationError(f"Portfolio reference missing: {trimmed!r}")
        value = multiplier_text

    try:
        amount = float(value)
    except ValueError:
        raise ValidationError(f"Non-numeric cash amount: {value!r}") from None

    return CashEntry(
        label=label,
        currency=currency,
        amount=amount,
        is_margin=MARGIN_FLAG in flags,
        is_equity=EQUITY_FLAG in flags,
        portfolio_ref=portfolio_ref,
    )


def read_cash(path: Path) -> list[CashEntry]:
    """
    Read cash entries; a missing file yields an empty list.

    Malformed lines are skipped with a warning.
    """
    file_path = Path(path)
    if not file_path.exists():
        logger.warning(f"Cash file not found at {file_path}, returning empty list")
        return []

    entries: list[CashEntry] = []
    with open(file_path, encoding="utf-8") as f:
        for line_num, line in enumerate(f, start=1):
            try:
                entry = parse_cash_line(line)
            except ValidationError as e:
                logger.warning(f"Skipping cash line {line_num} in {file_path}: {e.message}")
                continue
            if entry is not None:
                entries.append(entry)

    logger.info(f"Loaded {len(entries)} cash entries from {file_path}")
    return entries
