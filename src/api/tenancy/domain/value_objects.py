"""Value objects for the tenancy domain."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TenantId:
    """Identifier of a tenant in the registry.

    Tenant ids are positive integers assigned by the registry database.
    """

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValueError(f"Invalid TenantId: {self.value!r}")
        if self.value < 1:
            raise ValueError(f"Invalid TenantId: {self.value!r}")

    def __str__(self) -> str:
        """Return string representation."""
        return str(self.value)

    def __int__(self) -> int:
        return self.value

    @classmethod
    def from_string(cls, value: str) -> TenantId:
        """Create TenantId from a textual signal value.

        Args:
            value: Decimal tenant id, surrounding whitespace allowed

        Returns:
            TenantId instance

        Raises:
            ValueError: If value is not a positive decimal integer
        """
        text = value.strip()
        if not (text.isascii() and text.isdigit()):
            raise ValueError(f"Invalid TenantId: {value!r}")
        return cls(value=int(text))
