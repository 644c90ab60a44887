from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from src.domain.models import Instance, Subsystem

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Unavailable:
    """A handler's required subsystems are not all loaded."""

    missing: frozenset[Subsystem]

    @property
    def message(self) -> str:
        names = ", ".join(sorted(s.value for s in self.missing))
        return f"Required subsystems not loaded: {names}"


def check(required: Iterable[Subsystem], instance: Instance) -> Unavailable | None:
    """Return None when every required subsystem is loaded.

    Must run before the handler is invoked.
    """

    missing = instance.missing(required)
    if not missing:
        return None
    result = Unavailable(missing=missing)
    logger.debug(result.message)
    return result
