"""Typed records produced by the stream decoder."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from graphdump.bgv.pool import PoolNodeClass


@dataclass(frozen=True)
class GroupBegin:
    """A group of graphs, usually one compilation unit."""

    name: Any
    short_name: Any
    method: Any
    bci: int
    props: dict[str, Any] = field(default_factory=dict)
    offset: int = 0


@dataclass(frozen=True)
class GroupEnd:
    offset: int = 0


@dataclass(frozen=True)
class GraphBegin:
    """Header of one graph. ``index`` is dense and unique within the file;
    ``graph_id`` is the id the compiler wrote and may repeat."""

    index: int
    graph_id: int
    format: str
    args: tuple[Any, ...]
    props: dict[str, Any]
    name: str
    groups: tuple[GroupBegin, ...] = ()
    offset: int = 0


@dataclass(frozen=True)
class NodeDefine:
    id: int
    node_class: PoolNodeClass
    has_predecessor: bool
    props: dict[str, Any]
    offset: int = 0


@dataclass(frozen=True)
class EdgeDefine:
    """An edge from ``from_id`` to ``to_id``.

    Input slots produce edges into the declaring node; successor slots
    produce edges out of it. ``owner_id`` is the declaring node.
    """

    from_id: int
    to_id: int
    owner_id: int
    name: str
    index: int | None = None
    input_type: str | None = None
    successor: bool = False
    offset: int = 0

    def props(self) -> dict[str, Any]:
        props: dict[str, Any] = {"name": self.name, "successor": self.successor}
        if self.index is not None:
            props["index"] = self.index
        if self.input_type is not None:
            props["type"] = self.input_type
        return props


@dataclass(frozen=True)
class BlockDefine:
    id: int
    node_ids: tuple[int, ...]
    followers: tuple[int, ...]
    offset: int = 0


@dataclass(frozen=True)
class GraphEnd:
    index: int
    offset: int = 0


@dataclass(frozen=True)
class DocumentEnd:
    graph_count: int
    offset: int = 0


Record = Union[
    GroupBegin, GroupEnd, GraphBegin, NodeDefine, EdgeDefine, BlockDefine, GraphEnd, DocumentEnd
]
