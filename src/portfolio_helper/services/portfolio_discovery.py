"""Discovers portfolios from the data directory layout."""

import logging
import re
from pathlib import Path

from portfolio_helper.csv.holdings_reader import HOLDINGS_COLUMNS
from portfolio_helper.domain.models import ManagedPortfolio
from portfolio_helper.services.portfolio_registry import MAIN_PORTFOLIO_ID

logger = logging.getLogger(__name__)

HOLDINGS_FILENAME = "stocks.csv"
CASH_FILENAME = "cash.txt"

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    """``"My Retirement"`` -> ``"my-retirement"``."""
    return _NON_ALNUM.sub("-", name.lower()).strip("-")


def display_name(folder_name: str) -> str:
    return folder_name[:1].upper() + folder_name[1:]


def discover_portfolios(data_dir: Path) -> list[ManagedPortfolio]:
    """
    Build the portfolio list for ``data_dir``.

    - ``stocks.csv`` + ``cash.txt`` at the root form portfolio "main";
      a header-only ``stocks.csv`` is created when missing.
    - Every non-hidden subdirectory holding a ``stocks.csv`` forms one
      more portfolio, ordered by folder name.

    Portfolios come back empty; loading happens separately.
    """
    data_dir = Path(data_dir)
    data_dir.mkdir(parents=True, exist_ok=True)

    main_holdings = data_dir / HOLDINGS_FILENAME
    if not main_holdings.exists():
        main_holdings.write_text(",".join(HOLDINGS_COLUMNS) + "\n", encoding="utf-8")
        logger.info(f"Created empty {main_holdings}")

    portfolios = [
        ManagedPortfolio(
            MAIN_PORTFOLIO_ID,
            "Main",
            holdings_path=main_holdings,
            cash_path=data_dir / CASH_FILENAME,
        )
    ]

    subdirs = sorted(
        (p for p in data_dir.iterdir() if p.is_dir() and not p.name.startswith(".")),
        key=lambda p: p.name,
    )
    seen = {MAIN_PORTFOLIO_ID}
    for subdir in subdirs:
        holdings_path = subdir / HOLDINGS_FILENAME
        if not holdings_path.exists():
            continue
        portfolio_id = slugify(subdir.name)
        if not portfolio_id or portfolio_id in seen:
            logger.warning(f"Skipping portfolio folder {subdir.name!r}: id {portfolio_id!r} is empty or taken")
            continue
        seen.add(portfolio_id)
        portfolio = ManagedPortfolio(
            portfolio_id,
            display_name(subdir.name),
            holdings_path=holdings_path,
            cash_path=subdir / CASH_FILENAME,
        )
        portfolios.append(portfolio)
        logger.info(f"Discovered portfolio: {portfolio.name!r} (id={portfolio.id}) at {holdings_path}")

    logger.info(f"Registered {len(portfolios)} portfolio(s): {[p.id for p in portfolios]}")
    return portfolios
