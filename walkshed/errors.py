"""Exceptions raised by the reachability engine."""


class WalkshedError(Exception):
    """Base exception for network, search and snapshot operations."""


class EdgeEndpointMissing(WalkshedError, KeyError):
    """Raised when an edge references a node that is not in the network."""
    def __init__(self, node_id: str):
        self.node_id = node_id
        super().__init__(f"Edge endpoint '{node_id}' is not in the network")

    def __str__(self):
        return self.args[0]


class SelfLoop(WalkshedError, ValueError):
    """Raised when both edge endpoints are the same node."""
    def __init__(self, node_id: str):
        self.node_id = node_id
        super().__init__(f"Edge from '{node_id}' to itself is not allowed")


class OriginNotFound(WalkshedError, KeyError):
    """Raised when a search starts from a node that does not exist."""
    def __init__(self, node_id: str):
        self.node_id = node_id
        super().__init__(f"Origin node '{node_id}' not found")

    def __str__(self):
        return self.args[0]


class FormatError(WalkshedError, ValueError):
    """Raised when a snapshot is structurally invalid."""


class Unreachable(WalkshedError, LookupError):
    """Raised when a path is requested to a node with no finite distance."""
    def __init__(self, target: str):
        self.target = target
        super().__init__(f"Node '{target}' is not reachable from the origin")
