from typing import Callable, Dict, Type, TypeVar

from sharing_api.domains.sharing.models import ResourceKind

from .base import SharingStrategy

StrategyType = TypeVar("StrategyType", bound=Type[SharingStrategy])

STRATEGY_REGISTRY: Dict[ResourceKind, Type[SharingStrategy]] = {}


def register_strategy(kind: ResourceKind) -> Callable[[StrategyType], StrategyType]:
    """
    Class decorator registering a strategy as the handler for a resource kind.

    Raises:
        ValueError: If another strategy already handles the kind
    """

    def decorator(strategy_class: StrategyType) -> StrategyType:
        existing = STRATEGY_REGISTRY.get(kind)
        if existing is not None and existing is not strategy_class:
            raise ValueError(
                f"{kind.value} is already handled by {existing.__name__}"
            )
        strategy_class.kind = kind
        STRATEGY_REGISTRY[kind] = strategy_class
        return strategy_class

    return decorator


def get_strategy_class(kind: ResourceKind) -> Type[SharingStrategy]:
    """Return the strategy registered for a resource kind."""
    try:
        return STRATEGY_REGISTRY[kind]
    except KeyError:
        raise LookupError(f"No sharing strategy registered for {kind.value}")
