"""Holdings CSV reader."""

import csv
import logging
from pathlib import Path
from typing import Optional

from portfolio_helper.core.exceptions import ValidationError
from portfolio_helper.domain.models import Holding, LeveragedComponent

logger = logging.getLogger(__name__)

# Required columns; target_weight and letf are optional
HOLDINGS_COLUMNS = ["stock_label", "amount"]


def parse_leveraged_components(raw: Optional[str]) -> Optional[tuple[LeveragedComponent, ...]]:
    """
    Parse a ``letf`` cell: ``"2,SPY"`` or ``"1,CTA,1,IVV"``.

    Returns None for a blank cell.
    """
    if raw is None or not raw.strip():
        return None

    tokens = [t.strip() for t in raw.split(",") if t.strip()]
    if len(tokens) % 2 != 0:
        raise ValidationError(f"Leveraged components must be multiplier,symbol pairs: {raw!r}")

    components = []
    for i in range(0, len(tokens), 2):
        try:
            multiplier = float(tokens[i])
        except ValueError:
            raise ValidationError(f"Invalid leveraged multiplier {tokens[i]!r} in {raw!r}") from None
        components.append(LeveragedComponent(multiplier=multiplier, symbol=tokens[i + 1].upper()))
    return tuple(components)


def read_holdings(path: Path) -> list[Holding]:
    """
    Read holdings from a CSV file with header ``stock_label,amount[,target_weight][,letf]``.

    Raises:
        ValidationError: If the file is missing, lacks required columns,
            or contains a non-numeric amount or weight.
    """
    file_path = Path(path)
    if not file_path.exists():
        raise ValidationError(f"Holdings file not found: {file_path}")

    holdings: list[Holding] = []
    with open(file_path, newline="", encoding="utf-8") as csvfile:
        reader = csv.DictReader(csvfile)

        if reader.fieldnames:
            missing = set(HOLDINGS_COLUMNS) - {f.strip() for f in reader.fieldnames}
            if missing:
                raise ValidationError(f"Missing required columns in {file_path}: {sorted(missing)}")

        for row_num, raw_row in enumerate(reader, start=2):  # Header is row 1
            row = {(k or "").strip(): (v or "").strip() for k, v in raw_row.items()}
            symbol = row.get("stock_label", "").upper()
            if not symbol:
                continue
            try:
                quantity = float(row["amount"])
                weight_text = row.get("target_weight", "")
                target_weight = float(weight_text) if weight_text else None
            except ValueError:
                raise ValidationError(f"Invalid number in {file_path} at row {row_num}") from None

            holdings.append(
                Holding(
                    symbol=symbol,
                    quantity=quantity,
                    target_weight=target_weight,
                    leveraged_components=parse_leveraged_components(row.get("letf")),
                )
            )

    logger.info(f"Loaded {len(holdings)} holdings from {file_path}")
    return holdings
