"""
구매 주문 접수

주문 라인(모델 × 수량)을 개별 펌프 작업 항목으로 펼칩니다.
새 항목은 모두 QUEUE 스테이지에서 시작하며 시리얼은 미할당입니다.
"""

from __future__ import annotations

import uuid
from typing import Callable, List, Optional

import pandas as pd

from .models import PurchaseOrder, Pump
from .stages import Stage


def _new_id() -> str:
    return str(uuid.uuid4())


def expand_purchase_order(
    order: PurchaseOrder,
    *,
    now: Optional[pd.Timestamp] = None,
    id_factory: Callable[[], str] = _new_id,
) -> List[Pump]:
    """Return one QUEUE pump per unit ordered; line promise dates win over the order's."""
    stamp = (pd.Timestamp.now() if now is None else pd.Timestamp(now)).isoformat()
    pumps: List[Pump] = []

    for line in order.lines:
        for _ in range(max(1, int(line.quantity or 1))):
            pumps.append(
                Pump(
                    id=id_factory(),
                    model=line.model,
                    po=order.po,
                    customer=order.customer,
                    serial=None,
                    stage=Stage.QUEUE,
                    priority=line.priority or "Normal",
                    value=float(line.value_each or 0.0),
                    powder_color=line.color,
                    promise_date=line.promise_date or order.promise_date,
                    last_update=stamp,
                )
            )

    return pumps
