"""
Domain models — Pydantic types for the bootstrap.

    from dabootstrap.core.models import Action, Receipt, BootstrapConfig
"""

from dabootstrap.core.models.action import Action, Receipt
from dabootstrap.core.models.config import BootstrapConfig

__all__ = [
    "Action",
    "BootstrapConfig",
    "Receipt",
]
