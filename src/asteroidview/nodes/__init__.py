"""Publisher and viewer loops."""

from asteroidview.nodes.publisher import PosePublisherNode
from asteroidview.nodes.viewer import AsteroidViewerNode

__all__ = [
    "PosePublisherNode",
    "AsteroidViewerNode",
]
