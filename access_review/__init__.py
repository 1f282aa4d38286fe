"""
Data access application review engine.

Workflow core (state machine, revision cycles, editability and signature
rights, action ledger) plus a thin FastAPI service around it.
"""

__version__ = "0.1.0"
