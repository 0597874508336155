"""Authorization flags engine.

Pure predicates deciding which transitions are enabled for an order given
its approval flags, payment disposition, documents and soft-delete marker.
They only gate what this back-office offers: the Order API enforces the
same rules (and which actor owns which flag) on its side.

Predicates read attributes, so they work on ``OrderDTO`` instances and on
plain objects (``SimpleNamespace``) carrying booleans / ``None`` flags.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable

from modules.orders.constants import (
    APPROVAL_ACTIONS,
    APPROVAL_FIELDS,
    MIN_APPROVALS,
    Approval,
    OrderAction,
    ProcedePago,
)


def approval_of(order: Any, field: str) -> Approval:
    return Approval.coerce(getattr(order, field, None))


def approved_count(order: Any) -> int:
    """Number of approval flags that are strictly approved."""
    return sum(1 for field in APPROVAL_FIELDS if approval_of(order, field).is_approved)


def is_deleted(order: Any) -> bool:
    return getattr(order, "deleted_at", None) is not None


def _has_id(order: Any) -> bool:
    return getattr(order, "id", None) is not None


def _has_enough_approvals(order: Any) -> bool:
    return approved_count(order) >= MIN_APPROVALS


# ----------------------------------------------------------------------
# Per-action predicates
# ----------------------------------------------------------------------


def _approval_predicate(field: str) -> Callable[[Any], bool]:
    def can_approve(order: Any) -> bool:
        return not approval_of(order, field).is_approved and not is_deleted(order)

    return can_approve


def _can_transfer(order: Any) -> bool:
    return (
        getattr(order, "procede_pago", None) == ProcedePago.PAGAR
        and _has_enough_approvals(order)
        and not is_deleted(order)
    )


def _can_upload_operation_file(order: Any) -> bool:
    return (
        _has_enough_approvals(order)
        and not getattr(order, "url", None)
        and not is_deleted(order)
    )


def _can_upload_retention_receipt(order: Any) -> bool:
    return _has_id(order) and not is_deleted(order)


def _can_delete(order: Any) -> bool:
    return _has_id(order) and not is_deleted(order)


def _can_restore(order: Any) -> bool:
    return _has_id(order) and is_deleted(order)


_PREDICATES: Dict[str, Callable[[Any], bool]] = {
    **{action: _approval_predicate(field) for action, field in APPROVAL_ACTIONS.items()},
    OrderAction.TRANSFER: _can_transfer,
    OrderAction.UPLOAD_OPERATION_FILE: _can_upload_operation_file,
    OrderAction.UPLOAD_RETENTION_RECEIPT: _can_upload_retention_receipt,
    OrderAction.DELETE: _can_delete,
    OrderAction.RESTORE: _can_restore,
}


def can_transition(order: Any, action: str) -> bool:
    """Return ``True`` if *action* is currently enabled for *order*.

    Raises:
        ValueError: *action* is not a known ``OrderAction``.
    """
    try:
        predicate = _PREDICATES[OrderAction(action)]
    except ValueError:
        raise ValueError(f"Unknown order action: {action!r}") from None
    return predicate(order)


def enabled_actions(
    order: Any, actions: Iterable[str] = tuple(OrderAction)
) -> Dict[str, bool]:
    """Map each of *actions* to whether it is enabled for *order*."""
    return {str(action): can_transition(order, action) for action in actions}
