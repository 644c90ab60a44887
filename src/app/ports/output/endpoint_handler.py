from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from src.domain.models import ApiRequest


class IEndpointHandler(ABC):
    """Port for one engine endpoint bound to a loaded dataset."""

    @abstractmethod
    def __call__(self, request: ApiRequest) -> Any:
        """Serve the request and return the engine's native response."""
