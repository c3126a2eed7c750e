"""Invoice repository contract."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.invoices.models import Invoice


class IInvoiceRepository(IRepository["Invoice"]):
    @abstractmethod
    def number_exists(self, invoice_number: str) -> bool:
        """Whether any invoice already uses *invoice_number*."""

    @abstractmethod
    def get_for_order(self, order_id: str) -> Optional[Invoice]:
        """The invoice bound to *order_id*, if any."""
