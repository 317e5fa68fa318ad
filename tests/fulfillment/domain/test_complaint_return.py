"""Tests for the Complaint and Return aggregates."""

from datetime import datetime

import pytest
from fulfillment.complaint.complaint import Complaint, complaint_code
from fulfillment.complaint.events import ComplaintChecked, ComplaintFiled, ComplaintResolved
from fulfillment.order.order import Order
from fulfillment.returns.returns import Return
from protean.exceptions import ValidationError


def _make_order():
    return Order.create(
        order_ginee_id="G-2001",
        tracking="JNT0002",
        details_data=[
            {"sku": "SKU-001", "product_name": "Ribbon", "quantity": 2},
            {"sku": "SKU-002", "product_name": "Label", "variant": "Red", "quantity": 1},
        ],
        channel="Shopee",
        store="Main",
    )


def _file(operators=(("qc ribbon", "qc-1"), ("picking", "picker-1"))):
    return Complaint.file("CMP2610160001", _make_order(), "Wrong colour", created_by="cs-1", operators=list(operators))


class TestComplaintCode:
    def test_code_carries_day_and_sequence(self):
        assert complaint_code(datetime(2026, 10, 16), 7) == "CMP2610160007"


class TestFileComplaint:
    def test_snapshots_order_lines_and_header(self):
        complaint = _file()

        assert complaint.tracking == "JNT0002"
        assert complaint.order_ginee_id == "G-2001"
        assert complaint.channel == "Shopee"
        assert {(line.sku, line.quantity) for line in complaint.lines} == {("SKU-001", 2), ("SKU-002", 1)}
        assert complaint.checked is False
        assert complaint.total_fee == 0

    def test_records_handling_operators(self):
        complaint = _file()
        assert {(op.stage, str(op.operator_id), op.fee_charge) for op in complaint.operators} == {
            ("qc ribbon", "qc-1", 0),
            ("picking", "picker-1", 0),
        }

    def test_raises_filed_event(self):
        complaint = _file()
        assert any(isinstance(e, ComplaintFiled) for e in complaint._events)


class TestResolveComplaint:
    def test_charges_replace_operators(self):
        complaint = _file()
        complaint.resolve(
            "Refund half",
            20000,
            [{"operator_id": "qc-1", "stage": "qc ribbon", "fee_charge": 20000}],
            resolved_by="admin-1",
        )

        assert complaint.solution == "Refund half"
        assert complaint.total_fee == 20000
        assert [(str(op.operator_id), op.fee_charge) for op in complaint.operators] == [("qc-1", 20000)]
        assert str(complaint.resolved_by) == "admin-1"
        assert any(isinstance(e, ComplaintResolved) for e in complaint._events)

    def test_empty_charges_keep_operators(self):
        complaint = _file()
        complaint.resolve("Replace item", 0, [], resolved_by="admin-1")
        assert len(complaint.operators) == 2

    def test_negative_fee_is_rejected(self):
        complaint = _file()
        with pytest.raises(ValidationError):
            complaint.resolve("Refund", -1, [], resolved_by="admin-1")

    def test_charge_without_operator_is_rejected(self):
        complaint = _file()
        with pytest.raises(ValidationError):
            complaint.resolve("Refund", 100, [{"fee_charge": 100}], resolved_by="admin-1")


class TestCheckComplaint:
    def test_check_flag_round_trip(self):
        complaint = _file()
        complaint.mark_checked(True, checked_by="admin-1")
        assert complaint.checked is True
        assert str(complaint.checked_by) == "admin-1"

        complaint.mark_checked(False, checked_by="admin-1")
        assert complaint.checked is False
        assert any(isinstance(e, ComplaintChecked) for e in complaint._events)


class TestReturn:
    def test_record_points_back_at_the_order(self):
        order = _make_order()
        parcel = Return.record(
            "RTN0001",
            order,
            created_by="cs-1",
            return_type="refund",
            return_reason="Damaged",
        )

        assert parcel.old_tracking == "JNT0002"
        assert parcel.order_id == str(order.id)
        assert parcel.order_ginee_id == "G-2001"
        assert len(parcel.lines) == 2

    def test_update_numbers(self):
        parcel = Return.record("RTN0002", _make_order(), created_by="cs-1", return_type="refund", return_reason="Late")
        parcel.update_numbers("RN-1", "SC-1", updated_by="admin-1")

        assert (parcel.return_number, parcel.scrap_number) == ("RN-1", "SC-1")
        assert str(parcel.updated_by) == "admin-1"
