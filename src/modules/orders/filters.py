"""In-memory filtering of an already fetched order list.

Mirrors the filter bar of each back-office page: free-text search over the
order number and supplier name, exact ``estado``, the page's approval flag
(approved / pending), and the order date.  Soft-deleted orders are hidden
unless the page asks for them.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, List, Optional

from modules.orders.constants import TODOS, Approval, ApprovalFilter


@dataclass(frozen=True)
class OrderFilter:
    search: str = ""
    estado: str = TODOS
    approval: str = ApprovalFilter.TODOS
    approval_field: Optional[str] = None
    fecha: Optional[date | str] = None
    include_deleted: bool = False

    @property
    def fecha_key(self) -> Optional[str]:
        """The date filter as ``yyyy-MM-dd`` text (compared as a string)."""
        if self.fecha is None or self.fecha == "":
            return None
        if isinstance(self.fecha, date):
            return self.fecha.isoformat()[:10]
        return str(self.fecha)[:10]

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------

    def matches_search(self, order: Any) -> bool:
        if not self.search:
            return True
        needle = self.search.lower()
        return any(
            needle in (getattr(order, field, None) or "").lower()
            for field in ("numero_orden", "nombre_proveedor")
        )

    def matches_estado(self, order: Any) -> bool:
        return self.estado in ("", TODOS) or getattr(order, "estado", None) == self.estado

    def matches_approval(self, order: Any) -> bool:
        if self.approval_field is None or self.approval in ("", ApprovalFilter.TODOS):
            return True
        approved = Approval.coerce(getattr(order, self.approval_field, None)).is_approved
        if self.approval == ApprovalFilter.APROBADO:
            return approved
        return not approved

    def matches_fecha(self, order: Any) -> bool:
        wanted = self.fecha_key
        if wanted is None:
            return True
        fecha = getattr(order, "fecha_orden", None)
        if fecha is None:
            return False
        actual = fecha.isoformat()[:10] if isinstance(fecha, date) else str(fecha)[:10]
        return actual == wanted

    def matches(self, order: Any) -> bool:
        if not self.include_deleted and getattr(order, "deleted_at", None) is not None:
            return False
        return (
            self.matches_search(order)
            and self.matches_estado(order)
            and self.matches_approval(order)
            and self.matches_fecha(order)
        )

    def apply(self, orders: Iterable[Any]) -> List[Any]:
        return [order for order in orders if self.matches(order)]
