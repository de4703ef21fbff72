from abc import ABC, abstractmethod

from sharing_api.core.settings import Settings, settings
from sharing_api.domains.sharing.models import ResourceKind


class EntitlementChecker(ABC):
    """Decides whether the sharing capability is licensed."""

    @abstractmethod
    def is_sharing_enabled(self, kind: ResourceKind) -> bool:
        pass


class SettingsEntitlementChecker(EntitlementChecker):
    """Reads the entitlement from application settings."""

    def __init__(self, config: Settings = settings):
        self.config = config

    def is_sharing_enabled(self, kind: ResourceKind) -> bool:
        if not self.config.SHARING_ENTERPRISE_ENABLED:
            return False
        return kind.value in self.config.SHARING_ENTITLED_RESOURCE_KINDS
