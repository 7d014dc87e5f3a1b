"""Context object shared across worker threads."""

from dataclasses import dataclass
from typing import Optional

from tinyhttp.lifecycle.state import ServerLifecycle
from tinyhttp.pipeline.router import Router


@dataclass(frozen=True)
class WorkerContext:
    """Read-only dependencies handed to every connection worker."""

    router: Router
    lifecycle: Optional[ServerLifecycle] = None
