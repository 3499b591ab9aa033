"""
Domain models — Pydantic types for the stub generator.

All models are re-exported here for convenient access:

    from protostub.core.models import ServiceDescription, MethodDescription, SyntaxNode
"""

from protostub.core.models.service import MethodDescription, ServiceDescription
from protostub.core.models.syntax import SyntaxNode

__all__ = [
    # service.py
    "MethodDescription",
    "ServiceDescription",
    # syntax.py
    "SyntaxNode",
]
