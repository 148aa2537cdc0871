"""Runtime configuration for Flowgo."""

from dataclasses import dataclass, field
from typing import Dict
import os


@dataclass
class LayoutOptions:
    """Sizing and direction hints handed to the external layout engine."""

    direction: str = "LR"  # LR = left-to-right, TB = top-to-bottom
    node_width: int = 250
    node_height: int = 120
    node_separation: int = 100
    rank_separation: int = 300
    # Layer per node kind, so nodes of one kind stay grouped
    rank_groups: Dict[str, int] = field(default_factory=lambda: {
        "workflow": 0,
        "action": 1,
        "entity": 2,
        "role": 3,
        "data": 4,
    })

    def __post_init__(self):
        self.direction = self.direction.upper()
        if self.direction not in ("LR", "TB", "RL", "BT"):
            raise ValueError(f"Unsupported layout direction: {self.direction}")

    def to_dict(self) -> dict:
        return {
            "direction": self.direction,
            "nodeWidth": self.node_width,
            "nodeHeight": self.node_height,
            "nodeSeparation": self.node_separation,
            "rankSeparation": self.rank_separation,
            "groupSpacing": dict(self.rank_groups),
        }


def diagnostics_enabled() -> bool:
    """Whether FLOWGO_DIAGNOSTICS asks for graph construction logs."""
    return os.getenv("FLOWGO_DIAGNOSTICS", "false").lower() == "true"


@dataclass
class FlowgoConfig:
    """Configuration for the converters and service surfaces."""

    # Log every node/edge decision made while building graphs
    diagnostics: bool = False
    layout: LayoutOptions = field(default_factory=LayoutOptions)

    @classmethod
    def from_env(cls) -> "FlowgoConfig":
        """Create configuration from environment variables."""
        return cls(
            diagnostics=diagnostics_enabled(),
            layout=LayoutOptions(
                direction=os.getenv("FLOWGO_LAYOUT_DIRECTION", "LR"),
                node_width=int(os.getenv("FLOWGO_NODE_WIDTH", "250")),
                node_height=int(os.getenv("FLOWGO_NODE_HEIGHT", "120")),
            ),
        )


def get_config() -> FlowgoConfig:
    """Get the current configuration."""
    return FlowgoConfig.from_env()
