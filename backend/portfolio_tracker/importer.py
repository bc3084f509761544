"""Import transactions from broker CSV exports."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import IO, List, Union

import pandas as pd

from .models import Transaction, TransactionDraft, TransactionType
from .stores import TransactionStore

logger = logging.getLogger(__name__)

COLUMNS = ["date", "symbol", "quantity", "price", "company_name", "type"]
_CURRENCY_NOISE = re.compile(r"[^\d,.\-]")
_GROUPED_THOUSANDS = re.compile(r"^-?\d{1,3}(\.\d{3})+$")


def _clean_price(text: str) -> float:
    """Parse prices such as ``R$ 1.234,56``, ``12,50`` or ``12.50``."""

    cleaned = _CURRENCY_NOISE.sub("", text or "")
    if "," in cleaned:
        cleaned = cleaned.replace(".", "").replace(",", ".")
    try:
        return float(cleaned)
    except ValueError:
        return float("nan")


def _clean_quantity(text: str) -> float:
    """Parse quantities such as ``1.000``, ``10,5`` or ``-5``, keeping the sign."""

    cleaned = _CURRENCY_NOISE.sub("", text or "")
    if "," in cleaned or _GROUPED_THOUSANDS.match(cleaned):
        cleaned = cleaned.replace(".", "").replace(",", ".")
    try:
        return float(cleaned)
    except ValueError:
        return float("nan")


def _classify(text: str) -> str:
    lowered = (text or "").strip().lower()
    if "compra" in lowered or "buy" in lowered:
        return TransactionType.BUY.value
    if "div" in lowered or "provento" in lowered:
        return TransactionType.DIVIDEND.value
    return TransactionType.SELL.value


def normalize_frame(frame: pd.DataFrame) -> pd.DataFrame:
    """Rename the first six columns and coerce dates, quantities and prices.

    Rows with an unparseable date, a non-positive price, or (for trades) a
    non-positive quantity are dropped.
    """

    if frame.shape[1] < len(COLUMNS):
        raise ValueError(f"Expected at least {len(COLUMNS)} columns, got {frame.shape[1]}")

    df = frame.iloc[:, : len(COLUMNS)].copy()
    df.columns = COLUMNS
    df["date"] = pd.to_datetime(df["date"].str.strip(), format="%d/%m/%Y", errors="coerce").dt.date
    df["symbol"] = df["symbol"].str.strip().str.upper()
    df["company_name"] = df["company_name"].str.strip()
    df["quantity"] = df["quantity"].map(_clean_quantity)
    df["price"] = df["price"].map(_clean_price)
    df["type"] = df["type"].map(_classify)

    is_dividend = df["type"] == TransactionType.DIVIDEND.value
    df.loc[is_dividend, "quantity"] = 0
    valid = (
        df["date"].notna()
        & (df["symbol"] != "")
        & (df["price"] > 0)
        & (is_dividend | (df["quantity"] > 0))
    )
    dropped = int((~valid).sum())
    if dropped:
        logger.warning("Skipped %d invalid CSV rows", dropped)
    return df[valid].reset_index(drop=True)


def read_transactions_csv(source: Union[str, Path, IO[str]]) -> List[TransactionDraft]:
    """Read a CSV export (``Date, Ticker, Quantity, Price, Company, Type``) into drafts."""

    frame = pd.read_csv(source, dtype=str, keep_default_na=False)
    df = normalize_frame(frame)

    drafts: List[TransactionDraft] = []
    for row in df.itertuples(index=False):
        tx_type = TransactionType(row.type)
        quantity = float(row.quantity)
        price = float(row.price)
        total = price if tx_type is TransactionType.DIVIDEND else quantity * price
        drafts.append(
            TransactionDraft(
                symbol=row.symbol,
                company_name=row.company_name,
                type=tx_type,
                quantity=quantity,
                price=price,
                total=total,
                date=row.date,
            )
        )
    logger.info("Parsed %d transactions from CSV", len(drafts))
    return drafts


async def import_transactions(store: TransactionStore, drafts: List[TransactionDraft]) -> List[Transaction]:
    """Persist parsed drafts through ``store`` in file order."""

    created = [await store.create_transaction(draft) for draft in drafts]
    logger.info("Imported %d transactions", len(created))
    return created


__all__ = ["COLUMNS", "normalize_frame", "read_transactions_csv", "import_transactions"]
