from abc import ABC, abstractmethod

from boarddoc.common.exceptions import TransientFetchError
from boarddoc.common.logging import get_logger


class BaseIntegration(ABC):
    """Base class for the remote services boarddoc reads from.

    Subclasses report failures through ``service_error`` so every transport,
    status or payload problem surfaces as a ``TransientFetchError`` tagged with
    the service name.  ``health_check`` lets the wizard test credentials
    before any real fetch.
    """

    def __init__(self, name: str):
        self.name = name
        self.logger = get_logger(f"integrations.{name}")

    def service_error(self, method: str, path: str, detail: str) -> TransientFetchError:
        self.logger.error("%s %s %s failed: %s", self.name, method, path, detail)
        return TransientFetchError(self.name, detail)

    @abstractmethod
    async def health_check(self) -> bool:
        """Return True when the service is reachable and accepts our credentials."""
        ...
