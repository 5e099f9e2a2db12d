"""
Group color assignment for presentation layers.

A GroupColorAssigner is an ordinary object owned by the caller, one per
analysis session. Unseen groups receive palette colors in the order they
are first requested, wrapping around when the palette is exhausted.
"""

from typing import Dict, List, Optional, Sequence

DEFAULT_PALETTE = (
    '#1f77b4',  # Blue
    '#ff7f0e',  # Orange
    '#2ca02c',  # Green
    '#d62728',  # Red
    '#9467bd',  # Purple
    '#8c564b',  # Brown
    '#e377c2',  # Pink
    '#7f7f7f',  # Gray
    '#bcbd22',  # Olive
    '#17becf',  # Cyan
)


class GroupColorAssigner:
    """Deterministic group -> color mapping with manual overrides."""

    def __init__(self, palette: Optional[Sequence[str]] = None):
        self.palette = tuple(palette) if palette else DEFAULT_PALETTE
        self._colors: Dict[str, str] = {}
        self._next_index = 0

    def get_color(self, group: str) -> str:
        if group not in self._colors:
            self._colors[group] = self.palette[self._next_index % len(self.palette)]
            self._next_index += 1
        return self._colors[group]

    def set_color(self, group: str, color: str) -> None:
        """Override a group's color. Does not consume a palette slot."""
        self._colors[group] = color

    def all_colors(self) -> Dict[str, str]:
        return dict(self._colors)

    def groups_with_colors(self) -> List[Dict[str, str]]:
        return [{'group': group, 'color': color} for group, color in self._colors.items()]

    def reset(self) -> None:
        self._colors.clear()
        self._next_index = 0

    def available_colors(self) -> List[str]:
        return list(self.palette)
