# FILE: pharmaledger/services/number_series.py
from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from pharmaledger.core.config import settings
from pharmaledger.models import NumberSeries
from pharmaledger.utils.timezone import today_local

logger = logging.getLogger(__name__)


def _period_key(d: date) -> int:
    return d.year * 100 + d.month


def _locked_row(db: Session, key: str, period: int) -> Optional[NumberSeries]:
    return (
        db.query(NumberSeries)
        .filter(NumberSeries.key == key, NumberSeries.period == period)
        .with_for_update()
        .first()
    )


def next_document_number(
    db: Session,
    key: str,                        # e.g. "purchase_order", "stock_transfer:export"
    prefix: str,                     # e.g. "PO", "PXH"
    doc_date: Optional[date] = None,
    pad: Optional[int] = None,
) -> str:
    """
    Counter-backed number generator with UNIQUE(key, period).
    The sequence restarts every calendar month.

    Example: PO202410-0007
    """
    doc_date = doc_date or today_local()
    pad = pad or settings.DOC_NUMBER_PAD
    period = _period_key(doc_date)

    row = _locked_row(db, key, period)

    if not row:
        # Two creators racing on a fresh month: the loser hits IntegrityError
        # inside the savepoint and re-reads the winner's row.
        try:
            with db.begin_nested():
                row = NumberSeries(key=key, period=period, next_seq=1)
                db.add(row)
                db.flush()
        except IntegrityError:
            logger.info("number series %s/%s created concurrently, re-reading", key, period)
            row = _locked_row(db, key, period)
            if not row:
                raise

    seq = int(row.next_seq or 1)
    row.next_seq = seq + 1
    db.flush()

    return f"{prefix}{doc_date.year:04d}{doc_date.month:02d}-{seq:0{pad}d}"
