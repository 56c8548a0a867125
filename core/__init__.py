"""Core module - local inventory state and shared infrastructure.

This module contains the allocation ledger, the local storage registry,
state persistence backends, configuration and observability. It does not
talk to the ERP.

ERP-specific logic (Rivhit) belongs in /connectors/.
"""

__version__ = "1.0.0"
