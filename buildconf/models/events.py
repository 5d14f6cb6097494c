"""Change events emitted by the build configuration manager."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
from datetime import datetime

from .build_configurations import BuildConfiguration


@dataclass(frozen=True)
class ActiveConfigChangeEvent:
    """Emitted on every ``set_active_config`` call.

    Attributes:
        root: Workspace root whose entry was replaced
        config: The value just set for that root (None when cleared)
        active_configs: Roots with a non-None active configuration
        timestamp: When the change happened
    """

    root: str
    config: BuildConfiguration | None
    active_configs: Mapping[str, BuildConfiguration]
    timestamp: datetime = field(default_factory=datetime.now)
