"""
Sharing strategies, one per shareable resource kind.

Importing this package registers the built-in strategies. A new resource
kind adds a module here whose strategy is decorated with
``@register_strategy(kind)``; nothing else in the sharing domain needs to
change.
"""

from .base import SharingStrategy
from .registry import STRATEGY_REGISTRY, get_strategy_class, register_strategy
from .saved_queries import SavedQueryStrategy
from .work_items import WorkItemStrategy

__all__ = [
    "STRATEGY_REGISTRY",
    "SavedQueryStrategy",
    "SharingStrategy",
    "WorkItemStrategy",
    "get_strategy_class",
    "register_strategy",
]
