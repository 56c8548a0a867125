"""
Observability Module for the Inventory Console

Provides:
- Structured logging with correlation IDs (ERP request, storage, item)
"""

from core.observability.logging import (
    get_logger,
    configure_logging,
    CorrelationContext,
    with_correlation,
)

__all__ = [
    "get_logger",
    "configure_logging",
    "CorrelationContext",
    "with_correlation",
]
