"""Tests for the pure payment allocation functions."""

from decimal import Decimal

import pytest

from app.schemas.invoice import Invoice
from app.services import payment_allocation as allocation
from app.services.payment_allocation import AllocationState

TOTALS = {
    "inv1": Decimal("100"),
    "inv2": Decimal("250"),
    "inv3": Decimal("89.99"),
}


def _invoice(uuid: str, status: str = "pending", **fields) -> Invoice:
    return Invoice.model_validate({"uuid": uuid, "status": status, **fields})


def _state(*selected: str, amount: str = "", **fields) -> AllocationState:
    return AllocationState(selected_invoice_ids=selected, payment_amount=amount, **fields)


def _ready(state: AllocationState) -> AllocationState:
    return allocation.update_details(state, payment_method="transfer", payment_reference="REF-001")


class TestFilterEligible:
    def test_keeps_only_pending_synonyms(self):
        invoices = [
            _invoice("a", "paid"),
            _invoice("b", "pending"),
            _invoice("c", "pendiente"),
            _invoice("d", "overdue"),
        ]
        eligible = allocation.filter_eligible(invoices)
        assert [i.uuid for i in eligible] == ["b", "c"]

    def test_status_match_is_exact(self):
        assert allocation.filter_eligible([_invoice("a", "Pending"), _invoice("b", "")]) == []

    def test_preserves_input_order(self):
        invoices = [_invoice("z"), _invoice("a"), _invoice("m", "pendiente")]
        assert [i.uuid for i in allocation.filter_eligible(invoices)] == ["z", "a", "m"]


class TestSearchInvoices:
    @pytest.fixture
    def invoices(self):
        return [
            _invoice("1", folio="A-001", company="Textiles del Norte", nombre_emisor="Algodón SA"),
            _invoice("2", folio="B-002", company="Aceros MX", nombre_emisor="Metales del Bajío"),
            _invoice("3", folio="C-003", company="Plásticos", nombre_emisor="Polímeros"),
        ]

    def test_matches_folio(self, invoices):
        assert [i.uuid for i in allocation.search_invoices(invoices, "b-00")] == ["2"]

    def test_matches_company_case_insensitive(self, invoices):
        assert [i.uuid for i in allocation.search_invoices(invoices, "TEXTILES")] == ["1"]

    def test_matches_issuer_name(self, invoices):
        assert [i.uuid for i in allocation.search_invoices(invoices, "metales")] == ["2"]

    def test_empty_term_keeps_everything(self, invoices):
        assert len(allocation.search_invoices(invoices, "")) == 3

    def test_no_match(self, invoices):
        assert allocation.search_invoices(invoices, "zzz") == []


class TestSelection:
    def test_toggle_appends_in_selection_order(self):
        state = allocation.toggle(allocation.toggle(_state(), "inv3"), "inv1")
        assert state.selected_invoice_ids == ("inv3", "inv1")

    def test_toggle_off_removes_allocation(self):
        state = allocation.auto_allocate(_state("inv1", "inv2", amount="300"), TOTALS)
        state = allocation.toggle(state, "inv2")
        assert state.selected_invoice_ids == ("inv1",)
        assert "inv2" not in state.allocations
        assert state.allocations["inv1"] == Decimal("100")

    def test_allocations_stay_within_selection_for_any_toggle_sequence(self):
        state = _state(amount="500")
        for invoice_id in ["inv1", "inv2", "inv3", "inv2", "inv1", "inv2", "inv3", "inv1"]:
            state = allocation.toggle(state, invoice_id)
            state = allocation.auto_allocate(state, TOTALS)
            assert set(state.allocations) <= set(state.selected_invoice_ids)
            state = allocation.toggle(state, "inv3")
            assert set(state.allocations) <= set(state.selected_invoice_ids)

    def test_select_all_replaces_selection_and_drops_stale_allocations(self):
        state = allocation.auto_allocate(_state("inv1", "inv2", amount="350"), TOTALS)
        state = allocation.select_all(state, ["inv2", "inv3", "inv2"])
        assert state.selected_invoice_ids == ("inv2", "inv3")
        assert state.allocations == {"inv2": Decimal("250")}

    def test_clear_empties_selection_and_allocations(self):
        state = allocation.auto_allocate(_state("inv1", "inv2", amount="350"), TOTALS)
        state = allocation.clear(state)
        assert state.selected_invoice_ids == ()
        assert state.allocations == {}
        assert state.payment_amount == "350"

    def test_operations_do_not_mutate_input(self):
        original = _state("inv1", amount="100")
        allocation.toggle(original, "inv2")
        allocation.auto_allocate(original, TOTALS)
        assert original.selected_invoice_ids == ("inv1",)
        assert original.allocations == {}


class TestAutoAllocate:
    def test_exact_when_funds_are_sufficient(self):
        state = allocation.auto_allocate(_state("inv1", "inv2", "inv3", amount="439.99"), TOTALS)
        assert state.allocations == {
            "inv1": Decimal("100"),
            "inv2": Decimal("250"),
            "inv3": Decimal("89.99"),
        }
        summary = allocation.reconcile(state, TOTALS)
        assert summary.remaining_amount == Decimal("0")
        assert summary.is_fully_allocated

    def test_insufficient_funds_fill_in_selection_order(self):
        state = allocation.auto_allocate(_state("inv1", "inv2", "inv3", amount="300"), TOTALS)
        assert state.allocations == {
            "inv1": Decimal("100"),
            "inv2": Decimal("200"),
            "inv3": Decimal("0"),
        }
        summary = allocation.reconcile(state, TOTALS)
        assert summary.outstanding_balance == Decimal("139.99")
        assert summary.is_valid is False

    def test_depends_on_selection_order(self):
        state = allocation.auto_allocate(_state("inv3", "inv1", "inv2", amount="300"), TOTALS)
        assert state.allocations == {
            "inv3": Decimal("89.99"),
            "inv1": Decimal("100"),
            "inv2": Decimal("110.01"),
        }

    def test_excess_payment_stays_unassigned(self):
        state = allocation.auto_allocate(_state("inv1", "inv3", amount="500"), TOTALS)
        summary = allocation.reconcile(_ready(state), TOTALS)
        assert summary.total_allocated == Decimal("189.99")
        assert summary.remaining_amount == Decimal("310.01")
        assert summary.is_valid is False

    def test_replaces_manual_allocations(self):
        state = allocation.set_allocation(_state("inv1", "inv2", amount="100"), "inv2", "40")
        state = allocation.auto_allocate(state, TOTALS)
        assert state.allocations == {"inv1": Decimal("100"), "inv2": Decimal("0")}

    @pytest.mark.parametrize("amount", ["", "abc", "  "])
    def test_noop_without_parsable_amount(self, amount):
        state = allocation.set_allocation(_state("inv1", amount=amount), "inv1", "12")
        assert allocation.auto_allocate(state, TOTALS) is state

    def test_noop_without_selection(self):
        state = _state(amount="100")
        assert allocation.auto_allocate(state, TOTALS) is state

    def test_invalid_invoice_total_counts_as_zero(self):
        invoices = [_invoice("x", total="n/a"), _invoice("y", total="50")]
        totals = allocation.totals_by_id(invoices)
        state = allocation.auto_allocate(_state("x", "y", amount="80"), totals)
        assert state.allocations == {"x": Decimal("0"), "y": Decimal("50")}


class TestManualAllocation:
    def test_override_leaves_other_invoices_untouched(self):
        state = allocation.auto_allocate(_state("inv1", "inv2", "inv3", amount="439.99"), TOTALS)
        state = allocation.set_allocation(state, "inv2", "0")
        assert state.allocations["inv1"] == Decimal("100")
        assert state.allocations["inv2"] == Decimal("0")
        assert state.allocations["inv3"] == Decimal("89.99")
        assert allocation.reconcile(state, TOTALS).remaining_amount == Decimal("250")

    def test_overwrite_is_idempotent(self):
        state = _state("inv1", amount="10")
        once = allocation.set_allocation(state, "inv1", "7.5")
        twice = allocation.set_allocation(once, "inv1", "7.5")
        assert once.allocations == twice.allocations == {"inv1": Decimal("7.5")}

    @pytest.mark.parametrize("raw", ["-5", "abc", "", None])
    def test_invalid_or_negative_values_become_zero(self, raw):
        state = allocation.set_allocation(_state("inv1"), "inv1", raw)
        assert state.allocations["inv1"] == Decimal("0")

    def test_rejects_unselected_invoice(self):
        with pytest.raises(ValueError, match="not selected"):
            allocation.set_allocation(_state("inv1"), "inv2", "10")


class TestReconcile:
    def test_selected_total_is_informational(self):
        state = _ready(allocation.auto_allocate(_state("inv1", "inv2", amount="100"), TOTALS))
        summary = allocation.reconcile(state, TOTALS)
        assert summary.selected_total == Decimal("350")
        assert summary.is_valid is True

    def test_within_one_cent_is_valid(self):
        state = _ready(_state("inv1", amount="100.005"))
        state = allocation.set_allocation(state, "inv1", "100")
        summary = allocation.reconcile(state, TOTALS)
        assert summary.remaining_amount == Decimal("0.005")
        assert summary.is_valid is True

    def test_two_cents_off_is_invalid(self):
        state = _ready(_state("inv1", amount="100.02"))
        state = allocation.set_allocation(state, "inv1", "100")
        summary = allocation.reconcile(state, TOTALS)
        assert summary.remaining_amount == Decimal("0.02")
        assert summary.is_valid is False

    def test_over_allocation_detected(self):
        state = _ready(_state("inv1", amount="150"))
        state = allocation.set_allocation(state, "inv1", "150")
        summary = allocation.reconcile(state, TOTALS)
        assert summary.over_allocated_invoice_ids == ("inv1",)
        assert summary.is_valid is True
        assert allocation.reconcile(state, TOTALS, enforce_invoice_cap=True).is_valid is False

    @pytest.mark.parametrize(
        "changes",
        [
            {"payment_method": ""},
            {"payment_reference": ""},
            {"payment_amount": "0"},
            {"payment_amount": "abc"},
        ],
    )
    def test_gate_requires_every_field(self, changes):
        state = _ready(allocation.auto_allocate(_state("inv1", amount="100"), TOTALS))
        assert allocation.reconcile(state, TOTALS).is_valid is True
        broken = AllocationState(
            selected_invoice_ids=state.selected_invoice_ids,
            allocations=state.allocations,
            payment_amount=changes.get("payment_amount", state.payment_amount),
            payment_method=changes.get("payment_method", state.payment_method),
            payment_reference=changes.get("payment_reference", state.payment_reference),
        )
        assert allocation.reconcile(broken, TOTALS).is_valid is False

    def test_empty_selection_is_invalid(self):
        state = _ready(_state(amount="0.001"))
        assert allocation.reconcile(state, TOTALS).is_valid is False


class TestOrdering:
    def test_order_selected_first_is_stable(self):
        invoices = [_invoice("a"), _invoice("b"), _invoice("c"), _invoice("d")]
        ordered = allocation.order_selected_first(invoices, _state("d", "b"))
        assert [i.uuid for i in ordered] == ["b", "d", "a", "c"]
