"""
CSV 입출력 테스트 (작업 세트 내보내기, 구매 주문 CSV 읽기)
"""

from __future__ import annotations

import io
import json

import pandas as pd
import pytest

from pump_tracker.domain.csv_io import export_filename, parse_po_csv, pumps_to_csv, pumps_to_json
from pump_tracker.domain.exceptions import ValidationError
from pump_tracker.domain.intake import expand_purchase_order
from pump_tracker.domain.models import PUMP_COLUMNS, OrderLine
from pump_tracker.domain.stages import Stage

PO_CSV = """PO,Customer,Model,Quantity,Promise Date,Value Each,Priority,Color
PO-500,Acme,DD-4,2,2024-03-01,"$1,250.00",rush,Red
PO-500,Acme,HC-8,1,2024-03-01,,,

,,,,,,,
"""


# ============================================================
# 내보내기
# ============================================================

def test_pumps_to_csv_all_columns(sample_pumps):
    frame = pd.read_csv(io.StringIO(pumps_to_csv(sample_pumps)), dtype=str, keep_default_na=False)

    assert list(frame.columns) == list(PUMP_COLUMNS)
    assert frame["id"].tolist() == ["p1", "p2", "p3"]
    assert frame["stage"].tolist() == ["QUEUE", "FABRICATION", "ASSEMBLY"]


def test_pumps_to_csv_selected_columns(sample_pumps):
    text = pumps_to_csv(sample_pumps, columns=["id", "stage", "not_a_column"])

    assert text.splitlines()[0] == "id,stage"
    assert len(text.splitlines()) == 4


def test_pumps_to_json(sample_pumps):
    records = json.loads(pumps_to_json(sample_pumps, columns=["id", "serial", "stage"]))

    assert records[0] == {"id": "p1", "serial": None, "stage": "QUEUE"}
    assert json.loads(pumps_to_json([])) == []


def test_export_filename():
    now = pd.Timestamp("2024-01-10 09:30:15")

    assert export_filename("csv", now) == "pumptracker-export-2024-01-10T09-30-15.csv"


# ============================================================
# 구매 주문 CSV
# ============================================================

def test_parse_po_csv():
    """헤더 정규화, 금액 파싱, 우선순위 대소문자, 빈 행 무시"""
    order = parse_po_csv(PO_CSV, price_lookup={"HC-8": 3400.0}.get)

    assert order.po == "PO-500"
    assert order.customer == "Acme"
    assert order.promise_date == "2024-03-01"
    assert order.date_received is None
    assert order.lines == (
        OrderLine(model="DD-4", quantity=2, color="Red", value_each=1250.0, priority="Rush", promise_date="2024-03-01"),
        OrderLine(model="HC-8", quantity=1, color=None, value_each=3400.0, priority="Normal", promise_date="2024-03-01"),
    )


def test_parsed_po_expands_into_queue_pumps():
    order = parse_po_csv(PO_CSV)

    pumps = expand_purchase_order(order, now=pd.Timestamp("2024-01-10"))

    assert [p.model for p in pumps] == ["DD-4", "DD-4", "HC-8"]
    assert all(p.stage == Stage.QUEUE and p.po == "PO-500" for p in pumps)
    assert pumps[2].value == 0.0


def test_parse_po_csv_line_promise_dates_differ():
    text = "po,customer,model,quantity,promise_date,date_received\n" \
        "PO-1,Acme,DD-4,1,2024-03-01,2024-01-05\n" \
        "PO-1,Acme,HC-8,1,2024-04-01,2024-01-05\n"

    order = parse_po_csv(text)

    assert order.promise_date is None
    assert order.date_received == "2024-01-05"
    assert [line.promise_date for line in order.lines] == ["2024-03-01", "2024-04-01"]


@pytest.mark.parametrize(
    "text",
    [
        "",
        "po,customer,model,quantity\n",
        "po,customer,model\nPO-1,Acme,DD-4\n",
        "po,customer,model,quantity\nPO-1,Acme,DD-4,1\nPO-2,Acme,DD-4,1\n",
        "po,customer,model,quantity\nPO-1,Acme,DD-4,1\nPO-1,Beta,DD-4,1\n",
        "po,customer,model,quantity\nPO-1,Acme,DD-4,0\n",
        "po,customer,model,quantity\nPO-1,Acme,DD-4,1.5\n",
        "po,customer,model,quantity\nPO-1,Acme,,1\n",
        "po,customer,model,quantity,priority\nPO-1,Acme,DD-4,1,ASAP\n",
        "po,customer,model,quantity,promise_date\nPO-1,Acme,DD-4,1,someday\n",
        "po,customer,model,quantity,date_received\nPO-1,Acme,DD-4,1,2024-01-01\nPO-1,Acme,DD-4,1,2024-01-02\n",
    ],
    ids=[
        "empty",
        "header-only",
        "missing-quantity-column",
        "two-pos",
        "two-customers",
        "zero-quantity",
        "fractional-quantity",
        "missing-model",
        "unknown-priority",
        "bad-date",
        "inconsistent-received",
    ],
)
def test_parse_po_csv_rejects_invalid_files(text):
    with pytest.raises(ValidationError):
        parse_po_csv(text)
