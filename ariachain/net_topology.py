"""A routing table from node identifiers to IP addresses."""

from __future__ import annotations


class NetTopologyManager:
    """Maps node identifiers to the addresses they can be reached at."""

    def __init__(self) -> None:
        self._routing_table: dict[str, str] = {}

    def add_node(self, node_id: str, ip_address: str) -> None:
        """Add a node, replacing any address it already had."""
        self._routing_table[node_id] = ip_address

    def remove_node(self, node_id: str) -> None:
        """Remove a node; unknown nodes are ignored."""
        self._routing_table.pop(node_id, None)

    def get_ip_address(self, node_id: str) -> str:
        """Return the node's address, or an empty string if it is unknown."""
        return self._routing_table.get(node_id, "")