"""Page anchoring — locate an insertion point and keep the diff panel alive."""

from composerdiff.anchor.inserter import Debouncer, PanelInserter, PanelState
from composerdiff.anchor.debug_info import DebugInfo, get_debug_info
from composerdiff.anchor.locator import AnchorCandidate, AnchorLocator, default_strategies
from composerdiff.anchor.page import MutationObserver, MutationRecord, Page
from composerdiff.anchor.panel import PANEL_CLASS, build_panel

__all__ = [
    "PANEL_CLASS",
    "AnchorCandidate",
    "AnchorLocator",
    "DebugInfo",
    "Debouncer",
    "MutationObserver",
    "MutationRecord",
    "Page",
    "PanelInserter",
    "PanelState",
    "build_panel",
    "default_strategies",
    "get_debug_info",
]
