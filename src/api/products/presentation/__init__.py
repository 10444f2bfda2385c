"""HTTP presentation layer for the products bounded context."""
