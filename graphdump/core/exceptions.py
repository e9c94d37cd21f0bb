"""Graphdump custom exceptions."""

from __future__ import annotations


class GraphdumpError(Exception):
    """Base exception for graphdump errors."""


class DecodeError(GraphdumpError):
    """Error decoding a binary graph dump.

    ``offset`` is the position in the (decompressed) byte stream where the
    problem was detected, or None when it is not known.
    """

    def __init__(self, message: str, offset: int | None = None) -> None:
        self.offset = offset
        if offset is not None:
            message = f"{message} (at byte {offset})"
        super().__init__(message)


class MalformedHeader(DecodeError):
    """The stream does not start with a supported magic and version."""


class TruncatedStream(DecodeError):
    """The stream ended in the middle of a record."""


class UnknownRecordTag(DecodeError):
    """A record, pool or property tag byte is not recognised."""


class UnresolvedPoolReference(DecodeError):
    """A pool id was referenced before anything was bound to it."""


class PoolCycleDetected(DecodeError):
    """A composite pool value references itself, directly or transitively."""


class DanglingEdgeReference(DecodeError):
    """An edge names a node id that is not defined in the graph."""


class UnexpectedGraphShape(GraphdumpError):
    """A pass found a structure that violates what it knows about the format."""

    def __init__(self, message: str, pass_name: str, node_id: int | None = None) -> None:
        self.pass_name = pass_name
        self.node_id = node_id
        where = f"{pass_name}" if node_id is None else f"{pass_name}, node {node_id}"
        super().__init__(f"{message} [{where}]")


class GraphNotFound(GraphdumpError):
    """Graph index not present in the file."""


class NodeNotFound(GraphdumpError):
    """Node or edge not present in the graph."""
