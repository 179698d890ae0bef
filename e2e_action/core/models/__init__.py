"""
Domain models — Pydantic types for the action.

All models are re-exported here for convenient access:

    from e2e_action.core.models import Action, Receipt, ActionInputs, CacheSpec
"""

from e2e_action.core.models.action import Action, Receipt
from e2e_action.core.models.cache import CacheResult, CacheSpec
from e2e_action.core.models.inputs import ActionInputs

__all__ = [
    # action.py
    "Action",
    # inputs.py
    "ActionInputs",
    # cache.py
    "CacheResult",
    "CacheSpec",
    "Receipt",
]
