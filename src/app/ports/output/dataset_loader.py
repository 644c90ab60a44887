from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from src.domain.models import Instance


class IDatasetLoader(ABC):
    """Port for turning a dataset directory into a loaded Instance."""

    @abstractmethod
    def load(self, data_path: str | Path) -> Instance:
        """Load every configured subsystem; raise InitializationError on failure."""

    def release(self, instance: Instance) -> None:
        """Free resources held by the instance's subsystems."""
        for subsystem in instance.subsystems.values():
            close = getattr(subsystem, "close", None)
            if callable(close):
                close()
