"""
UI drawing and focus for menus and dialogue panels.

Quick Start:
    from engine.ui import UIRenderer, FocusManager

    renderer = UIRenderer(screen)
    renderer.draw_text("Start", 640, 400, align="center")

    focus = FocusManager()
    focus.set_order(["start", "quit"])
    focus.navigate(1)
"""

from engine.ui.renderer import UIRenderer, FontConfig
from engine.ui.focus import FocusManager, transfer_focus

__all__ = [
    # Renderer
    "UIRenderer",
    "FontConfig",

    # Focus
    "FocusManager",
    "transfer_focus",
]
