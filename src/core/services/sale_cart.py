"""
Sale cart.

Collects product lines for a new sale, enforcing one line per product and
quantities within the product's stock, then renders the create payload
the sales API expects.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from src.core.entities.product import Product
from src.core.entities.sale import PaymentMethod, SaleStatus
from src.core.exceptions import CartError


@dataclass
class CartLine:
    """A product line in the cart."""

    product_id: int | str
    name: str
    price: float
    quantity: int = 1
    stock: int | None = None

    @property
    def line_total(self) -> float:
        return self.price * self.quantity


@dataclass
class SaleCart:
    """Lines of a sale being assembled, in the order they were added."""

    lines: list[CartLine] = field(default_factory=list)

    @property
    def total(self) -> float:
        return sum(line.line_total for line in self.lines)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def find(self, product_id: int | str) -> CartLine | None:
        for line in self.lines:
            if line.product_id == product_id:
                return line
        return None

    def add_product(self, product: Product, quantity: int = 1) -> CartLine:
        """Add a product line; a product can only appear once."""
        if product.id is None:
            raise CartError("product_id", "Product has no identifier")
        if self.find(product.id) is not None:
            raise CartError("product_id", f"'{product.name}' is already in the sale")
        line = CartLine(
            product_id=product.id,
            name=product.name,
            price=product.price,
            stock=product.stock,
        )
        self._check_quantity(line, quantity)
        line.quantity = quantity
        self.lines.append(line)
        return line

    def remove_product(self, product_id: int | str) -> None:
        self.lines = [line for line in self.lines if line.product_id != product_id]

    def update_quantity(self, product_id: int | str, quantity: int | str) -> CartLine:
        """Change a line's quantity, accepting raw form input."""
        line = self.find(product_id)
        if line is None:
            raise CartError("product_id", f"Product {product_id} is not in the sale")
        try:
            parsed = int(quantity)
        except (TypeError, ValueError):
            raise CartError("quantity", "Quantity must be a whole number") from None
        self._check_quantity(line, parsed)
        line.quantity = parsed
        return line

    @staticmethod
    def _check_quantity(line: CartLine, quantity: int) -> None:
        if quantity <= 0:
            raise CartError("quantity", "Quantity must be greater than zero")
        if line.stock is not None and quantity > line.stock:
            raise CartError("quantity", f"Only {line.stock} units available")

    def to_payload(
        self,
        customer: str,
        status: SaleStatus = SaleStatus.PENDING,
        payment_method: PaymentMethod = PaymentMethod.CASH,
        when: datetime | None = None,
    ) -> dict[str, Any]:
        """
        Render the create payload.

        The first line is flattened into the top-level fields, the rest go
        under `additional_products`.
        """
        if not customer.strip():
            raise CartError("customer", "Customer name is required")
        if self.is_empty:
            raise CartError("products", "Add at least one product")

        first, *rest = self.lines
        return {
            "customer": customer.strip(),
            "total": self.total,
            "status": status.value,
            "payment_method": payment_method.value,
            "date": (when or datetime.now()).isoformat(),
            "product_id": first.product_id,
            "quantity": first.quantity,
            "price": first.price,
            "additional_products": [
                {"product_id": line.product_id, "quantity": line.quantity, "price": line.price}
                for line in rest
            ],
        }
