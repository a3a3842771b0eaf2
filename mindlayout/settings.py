"""Layout configuration."""

import json
from dataclasses import dataclass, asdict
from typing import Optional

from mindlayout.model import LayoutMode, Size


DEFAULT_HORIZONTAL_OFFSET = 240.0
DEFAULT_ROOT_SPACING = 160.0
DEFAULT_CHILD_SPACING = 100.0
DEFAULT_MAX_PROBES = 500


@dataclass
class LayoutSettings:
    """Spacing constants and limits shared by the layout and placement code."""
    horizontal_offset: float = DEFAULT_HORIZONTAL_OFFSET
    root_spacing: float = DEFAULT_ROOT_SPACING
    child_spacing: float = DEFAULT_CHILD_SPACING
    mode: str = LayoutMode.HORIZONTAL.value
    max_probes: int = DEFAULT_MAX_PROBES
    probe_width: float = 100.0
    probe_height: float = 40.0

    @property
    def layout_mode(self) -> LayoutMode:
        try:
            return LayoutMode(self.mode)
        except ValueError:
            return LayoutMode.HORIZONTAL

    @property
    def probe_size(self) -> Size:
        return Size(self.probe_width, self.probe_height)

    def spacing_for_depth(self, depth: int) -> float:
        """Vertical gap between siblings placed at ``depth``."""
        return self.root_spacing if depth <= 1 else self.child_spacing

    def depth_offset(self, depth: int) -> float:
        """Cumulative distance from the root to the row at ``depth``."""
        if depth == 0:
            return 0.0
        return self.root_spacing + (depth - 1) * self.child_spacing

    def to_json(self) -> str:
        return json.dumps(asdict(self))

    @classmethod
    def from_json(cls, data: Optional[str]) -> "LayoutSettings":
        if not data:
            return cls()
        try:
            d = json.loads(data)
            # Filter to only known fields to handle schema evolution
            known = {f.name for f in cls.__dataclass_fields__.values()}
            return cls(**{k: v for k, v in d.items() if k in known})
        except (json.JSONDecodeError, TypeError, AttributeError):
            return cls()
