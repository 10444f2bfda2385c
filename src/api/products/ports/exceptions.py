"""Exceptions for the products bounded context."""


class ProductNotFoundError(Exception):
    """Raised when a product does not exist in the current tenant."""

    def __init__(self, product_id: str):
        super().__init__(f"Product {product_id} not found")
        self.product_id = product_id
