"""Observability for the registry engine and the per-tenant engine cache.

Instrumentation goes through domain probes rather than direct logger calls.
See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from infrastructure.observability.probes import DefaultEngineProbe, EngineProbe
from shared_kernel.observability_context import ObservationContext

__all__ = [
    "DefaultEngineProbe",
    "EngineProbe",
    "ObservationContext",
]
