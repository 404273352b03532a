"""Multi-invoice payment allocation.

Pure functions over an explicit ``AllocationState``: selecting invoices,
distributing one payment amount across them and reconciling the result.
None of the functions mutate their input; each returns a new state.

Invariant kept by every operation: every key of ``allocations`` is a
member of ``selected_invoice_ids``.
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from decimal import Decimal

from app.core.money import ZERO, parse_amount, parse_amount_or_none, parse_non_negative_amount
from app.schemas.invoice import PENDING_STATUSES, Invoice

DEFAULT_TOLERANCE = Decimal("0.01")


@dataclass(frozen=True)
class AllocationState:
    """Everything the payment dialog holds between user actions."""

    selected_invoice_ids: tuple[str, ...] = ()
    allocations: Mapping[str, Decimal] = field(default_factory=dict)
    payment_amount: str = ""
    payment_method: str = ""
    payment_reference: str = ""
    attachment: str | None = None
    search_term: str = ""

    def is_selected(self, invoice_id: str) -> bool:
        return invoice_id in self.selected_invoice_ids


@dataclass(frozen=True)
class Reconciliation:
    """Summary recomputed after every change to the dialog."""

    selected_total: Decimal
    payment_amount: Decimal
    total_allocated: Decimal
    remaining_amount: Decimal
    outstanding_balance: Decimal
    is_fully_allocated: bool
    over_allocated_invoice_ids: tuple[str, ...]
    is_valid: bool


def filter_eligible(invoices: Iterable[Invoice]) -> list[Invoice]:
    """Keep only invoices awaiting payment, preserving input order."""
    return [invoice for invoice in invoices if invoice.status in PENDING_STATUSES]


def search_invoices(invoices: Iterable[Invoice], term: str) -> list[Invoice]:
    """Case-insensitive substring match on folio, company or issuer name."""
    needle = term.lower()
    return [
        invoice
        for invoice in invoices
        if needle in invoice.folio.lower()
        or needle in invoice.company.lower()
        or needle in invoice.issuer_name.lower()
    ]


def order_selected_first(invoices: Sequence[Invoice], state: AllocationState) -> list[Invoice]:
    """Display order: selected invoices first, otherwise stable."""
    return sorted(invoices, key=lambda invoice: not state.is_selected(invoice.uuid))


def totals_by_id(invoices: Iterable[Invoice]) -> dict[str, Decimal]:
    return {invoice.uuid: invoice.total for invoice in invoices}


def toggle(state: AllocationState, invoice_id: str) -> AllocationState:
    """Deselect (dropping its allocation) or append ``invoice_id`` to the selection."""
    if state.is_selected(invoice_id):
        return replace(
            state,
            selected_invoice_ids=tuple(i for i in state.selected_invoice_ids if i != invoice_id),
            allocations={k: v for k, v in state.allocations.items() if k != invoice_id},
        )
    return replace(state, selected_invoice_ids=(*state.selected_invoice_ids, invoice_id))


def select_all(state: AllocationState, invoice_ids: Iterable[str]) -> AllocationState:
    """Replace the selection with exactly ``invoice_ids``."""
    selected = tuple(dict.fromkeys(invoice_ids))
    return replace(
        state,
        selected_invoice_ids=selected,
        allocations={k: v for k, v in state.allocations.items() if k in selected},
    )


def clear(state: AllocationState) -> AllocationState:
    return replace(state, selected_invoice_ids=(), allocations={})


def auto_allocate(state: AllocationState, totals: Mapping[str, Decimal]) -> AllocationState:
    """Greedily fill each selected invoice, in selection order, until the payment runs out.

    The previous allocations are replaced entirely. Any payment left over
    once every invoice is fully covered stays unassigned. Does nothing when
    the payment amount is missing or unparsable, or nothing is selected.
    """
    amount = parse_amount_or_none(state.payment_amount)
    if amount is None or not state.selected_invoice_ids:
        return state

    remaining = amount
    allocations: dict[str, Decimal] = {}
    for invoice_id in state.selected_invoice_ids:
        if invoice_id not in totals:
            continue
        allocation = max(ZERO, min(remaining, totals[invoice_id]))
        allocations[invoice_id] = allocation
        remaining -= allocation

    return replace(state, allocations=allocations)


def set_allocation(state: AllocationState, invoice_id: str, raw_value: object) -> AllocationState:
    """Overwrite the allocation of one selected invoice; other invoices are untouched."""
    if not state.is_selected(invoice_id):
        raise ValueError(f"Invoice {invoice_id} is not selected")
    allocations = dict(state.allocations)
    allocations[invoice_id] = parse_non_negative_amount(raw_value)
    return replace(state, allocations=allocations)


def update_details(
    state: AllocationState,
    payment_amount: str | None = None,
    payment_method: str | None = None,
    payment_reference: str | None = None,
    attachment: str | None = None,
) -> AllocationState:
    changes: dict[str, object] = {}
    if payment_amount is not None:
        changes["payment_amount"] = payment_amount
    if payment_method is not None:
        changes["payment_method"] = payment_method
    if payment_reference is not None:
        changes["payment_reference"] = payment_reference
    if attachment is not None:
        changes["attachment"] = attachment or None
    return replace(state, **changes)  # type: ignore[arg-type]


def reconcile(
    state: AllocationState,
    totals: Mapping[str, Decimal],
    tolerance: Decimal = DEFAULT_TOLERANCE,
    enforce_invoice_cap: bool = False,
) -> Reconciliation:
    """Compute the remainder and whether the batch may be submitted.

    ``remaining_amount`` is payment not yet assigned to any invoice;
    ``outstanding_balance`` is what the selected invoices still owe after
    this batch and does not affect validity.
    """
    selected_total = sum(
        (totals.get(invoice_id, ZERO) for invoice_id in state.selected_invoice_ids), ZERO
    )
    total_allocated = sum(state.allocations.values(), ZERO)
    payment_amount = parse_amount(state.payment_amount)
    remaining = payment_amount - total_allocated
    fully_allocated = abs(remaining) < tolerance

    over_allocated = tuple(
        invoice_id
        for invoice_id, allocation in state.allocations.items()
        if invoice_id in totals and allocation > totals[invoice_id]
    )

    is_valid = (
        bool(state.selected_invoice_ids)
        and payment_amount > ZERO
        and bool(state.payment_method)
        and bool(state.payment_reference)
        and fully_allocated
        and not (enforce_invoice_cap and over_allocated)
    )

    return Reconciliation(
        selected_total=selected_total,
        payment_amount=payment_amount,
        total_allocated=total_allocated,
        remaining_amount=remaining,
        outstanding_balance=selected_total - total_allocated,
        is_fully_allocated=fully_allocated,
        over_allocated_invoice_ids=over_allocated,
        is_valid=is_valid,
    )
