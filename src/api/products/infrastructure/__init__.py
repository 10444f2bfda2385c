"""Infrastructure for the products bounded context."""
