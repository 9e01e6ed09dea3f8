"""Interactive download flow: intake, destination menu, finalization."""

from torrent_bridge.services.flow.controller import FlowController
from torrent_bridge.services.flow.finalizer import Finalizer

__all__ = ["FlowController", "Finalizer"]
