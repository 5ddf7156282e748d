"""Connection discovery and scoring between wings."""

from wingnest.connections.manager import ConnectionManager
from wingnest.connections.scoring import calculate_connection_score

__all__ = [
    "ConnectionManager",
    "calculate_connection_score",
]
