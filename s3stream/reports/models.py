"""Report record models."""
from dataclasses import dataclass
from typing import Dict, Any, Optional


@dataclass
class OfferReport:
    """
    One offer-processing error record.

    Attributes:
        customer_id: Customer identifier
        product_id: Product identifier
        error_message: Why the offer was rejected
    """
    customer_id: str
    product_id: str
    error_message: Optional[str] = None

    FIELDS = ('customer_id', 'product_id', 'error_message')

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a dict with keys in column order."""
        return {name: getattr(self, name) for name in self.FIELDS}
