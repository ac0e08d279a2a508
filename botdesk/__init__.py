"""
Botdesk - multi-tenant chatbot platform core

Retrieval-augmented chat over per-user document sets, with
subscription quota admission and token usage metering.
"""

__version__ = "0.1.0"
