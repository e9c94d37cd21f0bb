"""Stream decoder for BGV graph dumps.

The decoder walks the document once, front to back, and yields typed
records. It never holds more than one graph's records at a time.

BGV graph blocks are not length-prefixed, so a graph is skipped by decoding
it in skip mode: every pool object is still read and bound (the pool spans
the whole document), but no node, edge or property records are built, and
raw byte runs are skipped in bounded chunks.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from typing import Any

from graphdump.bgv import format as bgv
from graphdump.bgv.pool import (
    ConstantPool,
    EdgeInfo,
    PoolClass,
    PoolEnum,
    PoolField,
    PoolMethod,
    PoolNodeClass,
    PoolNodeRef,
    PoolSignature,
    PoolSourcePosition,
    PoolValue,
    SourceLocation,
    describe_value,
)
from graphdump.bgv.reader import BinaryReader, Source
from graphdump.bgv.records import (
    BlockDefine,
    DocumentEnd,
    EdgeDefine,
    GraphBegin,
    GraphEnd,
    GroupBegin,
    GroupEnd,
    NodeDefine,
    Record,
)
from graphdump.core.exceptions import (
    DecodeError,
    GraphNotFound,
    MalformedHeader,
    TruncatedStream,
    UnknownRecordTag,
)

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"%[sd]")


def compose_graph_name(
    groups: list[GroupBegin] | tuple[GroupBegin, ...], format: str, args: tuple[Any, ...]
) -> str:
    """Group short names followed by the formatted graph name, '/'-joined."""
    remaining = iter(args)

    def substitute(match: re.Match[str]) -> str:
        arg = next(remaining, None)
        return match.group(0) if arg is None else describe_value(arg)

    name = _PLACEHOLDER.sub(substitute, format)
    components = [describe_value(group.short_name) for group in groups]
    components.append(name)
    return "/".join(components)


class StreamDecoder:
    """Decodes one BGV document into records.

    The pool is passed in explicitly and must belong to this document only.
    In lenient mode, unknown top-level tags are logged and skipped instead
    of raising UnknownRecordTag.
    """

    def __init__(
        self, source: Source, pool: ConstantPool | None = None, lenient: bool = False
    ) -> None:
        self._reader = BinaryReader(source)
        self.pool = pool if pool is not None else ConstantPool()
        self.lenient = lenient
        self.version: tuple[int, int] | None = None
        self.offsets: list[int] = []
        self._groups: list[GroupBegin] = []
        self._next_index = 0
        self._pending: GraphBegin | None = None
        self._top: Iterator[GroupBegin | GroupEnd | GraphBegin | DocumentEnd] | None = None

    def close(self) -> None:
        self._reader.close()

    def __enter__(self) -> StreamDecoder:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    @property
    def offset(self) -> int:
        return self._reader.offset

    # Header and top level

    def read_header(self) -> tuple[int, int]:
        """Read and check the magic and version. Idempotent."""
        if self.version is not None:
            return self.version
        try:
            magic = self._reader.read_bytes(len(bgv.MAGIC))
            major = self._reader.read_uint8()
            minor = self._reader.read_uint8()
        except TruncatedStream as e:
            raise MalformedHeader("Stream too short for a BGV header", 0) from e
        if magic != bgv.MAGIC:
            raise MalformedHeader(f"Bad magic {magic!r}, expected {bgv.MAGIC!r}", 0)
        if (major, minor) not in bgv.SUPPORTED_VERSIONS:
            raise MalformedHeader(f"Unsupported BGV version {major}.{minor}", len(bgv.MAGIC))
        self.version = (major, minor)
        logger.debug("BGV version %d.%d", major, minor)
        return self.version

    def _top_level(self) -> Iterator[GroupBegin | GroupEnd | GraphBegin | DocumentEnd]:
        self.read_header()
        while True:
            if self._reader.at_end():
                yield DocumentEnd(self._next_index, self._reader.offset)
                return

            offset = self._reader.offset
            token = self._reader.read_sint8()
            if token == bgv.BEGIN_GROUP:
                group = self._read_group(offset)
                self._groups.append(group)
                yield group
            elif token == bgv.CLOSE_GROUP:
                if self._groups:
                    self._groups.pop()
                yield GroupEnd(offset)
            elif token == bgv.BEGIN_GRAPH:
                header = self._read_graph_header(offset)
                self._pending = header
                yield header
                if self._pending is header:
                    self.skip_graph()
            elif self.lenient:
                logger.warning(
                    "Skipping unknown top-level tag 0x%02x at byte %d", token & 0xFF, offset
                )
            else:
                raise UnknownRecordTag(f"Unknown top-level tag 0x{token & 0xFF:02x}", offset)

    def _top_level_iter(self) -> Iterator[GroupBegin | GroupEnd | GraphBegin | DocumentEnd]:
        if self._top is None:
            self._top = self._top_level()
        return self._top

    def next_graph(self) -> GraphBegin | None:
        """Advance to the next graph header; its body is left unread.

        Returns None at document end. A body left unread by the caller is
        skipped before moving on.
        """
        for record in self._top_level_iter():
            if isinstance(record, GraphBegin):
                return record
            if isinstance(record, DocumentEnd):
                return None
        return None

    def seek_to_graph(self, index: int) -> GraphBegin:
        """Skip forward to graph ``index`` and return its header.

        Graphs before ``index`` are decoded in skip mode so the pool stays
        consistent. Seeking backwards is not possible on a stream.
        """
        if index < 0:
            raise GraphNotFound(f"Graph index {index} is negative")
        if index < self._next_index - (1 if self._pending is not None else 0):
            raise GraphNotFound(f"Graph {index} is behind the decoder; open a new decoder")
        if self._pending is not None and self._pending.index == index:
            return self._pending
        while True:
            header = self.next_graph()
            if header is None:
                raise GraphNotFound(f"Graph {index} not found, file has {self._next_index} graphs")
            if header.index == index:
                return header
            logger.debug("Skipping graph %d (%s)", header.index, header.name)
            self.skip_graph()

    def records(self) -> Iterator[Record]:
        """Every record of the document, in stream order."""
        for record in self._top_level_iter():
            yield record
            if isinstance(record, GraphBegin):
                yield from self.graph_records()

    # Graphs

    def _read_group(self, offset: int) -> GroupBegin:
        name = self._read_pool_object()
        short_name = self._read_pool_object()
        method = self._read_pool_object()
        bci = self._reader.read_sint32()
        props = self._read_props(keep=True)
        return GroupBegin(name, short_name, method, bci, props or {}, offset)

    def _read_graph_header(self, offset: int) -> GraphBegin:
        graph_id = self._reader.read_sint32()
        format = self._read_string() or ""
        argc = self._reader.read_sint32()
        args = tuple(self._read_prop_value(keep=True) for _ in range(argc))
        props = self._read_props(keep=True) or {}
        groups = tuple(self._groups)
        header = GraphBegin(
            index=self._next_index,
            graph_id=graph_id,
            format=format,
            args=args,
            props=props,
            name=compose_graph_name(groups, format, args),
            groups=groups,
            offset=offset,
        )
        self._next_index += 1
        self.offsets.append(offset)
        return header

    def graph_records(self) -> Iterator[NodeDefine | EdgeDefine | BlockDefine | GraphEnd]:
        """Records of the pending graph body: nodes, then edges, then blocks."""
        header = self._pending
        if header is None:
            raise DecodeError("No graph header has been read", self._reader.offset)
        self._pending = None

        edges: list[EdgeDefine] = []
        node_count = self._read_count()
        for _ in range(node_count):
            node = self._read_node(edges, keep=True)
            if node is not None:
                yield node
        yield from edges
        block_count = self._read_count()
        for _ in range(block_count):
            block = self._read_block(keep=True)
            if block is not None:
                yield block
        yield GraphEnd(header.index, self._reader.offset)

    def skip_graph(self) -> None:
        """Consume the pending graph body without building records."""
        if self._pending is None:
            return
        self._pending = None
        self._read_graph_body(keep=False)

    def _read_graph_body(self, keep: bool) -> dict[str, Any] | None:
        node_count = self._read_count()
        classes: list[str] = []
        for _ in range(node_count):
            node = self._read_node(None, keep=keep)
            if node is not None:
                classes.append(node.node_class.name)
        block_count = self._read_count()
        for _ in range(block_count):
            self._read_block(keep=False)
        if not keep:
            return None
        return {"node_count": node_count, "node_classes": classes, "block_count": block_count}

    def _read_node(self, edges: list[EdgeDefine] | None, keep: bool) -> NodeDefine | None:
        offset = self._reader.offset
        node_id = self._reader.read_sint32()
        node_class = self._read_pool_object()
        if not isinstance(node_class, PoolNodeClass):
            raise DecodeError(f"Node {node_id} has no node class (got {node_class!r})", offset)
        has_predecessor = self._reader.read_bool()
        props = self._read_props(keep=keep)

        for info in node_class.inputs:
            self._read_edge_ids(info, node_id, edges, successor=False, offset=offset)
        for info in node_class.outputs:
            self._read_edge_ids(info, node_id, edges, successor=True, offset=offset)

        if not keep:
            return None
        return NodeDefine(node_id, node_class, has_predecessor, props or {}, offset)

    def _read_edge_ids(
        self,
        info: EdgeInfo,
        node_id: int,
        edges: list[EdgeDefine] | None,
        successor: bool,
        offset: int,
    ) -> None:
        if info.indirect:
            count = self._reader.read_sint16()
            ids = [self._reader.read_sint32() for _ in range(count)]
        else:
            ids = [self._reader.read_sint32()]

        if edges is None:
            return
        for index, other in enumerate(ids):
            if other == bgv.NULL_NODE_ID:
                continue
            from_id, to_id = (node_id, other) if successor else (other, node_id)
            edges.append(
                EdgeDefine(
                    from_id=from_id,
                    to_id=to_id,
                    owner_id=node_id,
                    name=info.name,
                    index=index if info.indirect else None,
                    input_type=info.input_type,
                    successor=successor,
                    offset=offset,
                )
            )

    def _read_block(self, keep: bool) -> BlockDefine | None:
        offset = self._reader.offset
        block_id = self._reader.read_sint32()
        node_ids = self._read_ids(keep)
        followers = self._read_ids(keep)
        if not keep:
            return None
        return BlockDefine(block_id, tuple(node_ids), tuple(followers), offset)

    def _read_ids(self, keep: bool) -> list[int]:
        count = self._read_count()
        if not keep:
            self._reader.skip(count * 4)
            return []
        return [self._reader.read_sint32() for _ in range(count)]

    def _read_count(self) -> int:
        offset = self._reader.offset
        count = self._reader.read_sint32()
        if count < 0:
            raise DecodeError(f"Negative count {count}", offset)
        return count

    # Properties

    def _read_props(self, keep: bool) -> dict[str, Any] | None:
        count = self._reader.read_sint16()
        props: dict[str, Any] | None = {} if keep else None
        for _ in range(count):
            key = self._read_pool_object()
            value = self._read_prop_value(keep)
            if props is not None:
                props[describe_value(key)] = value
        return props

    def _read_prop_value(self, keep: bool) -> Any:
        offset = self._reader.offset
        tag = self._reader.read_sint8()
        if tag == bgv.PROPERTY_POOL:
            return self._read_pool_object()
        if tag == bgv.PROPERTY_INT:
            return self._reader.read_sint32()
        if tag == bgv.PROPERTY_LONG:
            return self._reader.read_sint64()
        if tag == bgv.PROPERTY_DOUBLE:
            return self._reader.read_float64()
        if tag == bgv.PROPERTY_FLOAT:
            return self._reader.read_float32()
        if tag == bgv.PROPERTY_TRUE:
            return True
        if tag == bgv.PROPERTY_FALSE:
            return False
        if tag == bgv.PROPERTY_ARRAY:
            return self._read_array(keep)
        if tag == bgv.PROPERTY_SUBGRAPH:
            self._read_props(keep=False)
            return self._read_graph_body(keep)
        raise UnknownRecordTag(f"Unknown property tag 0x{tag & 0xFF:02x}", offset)

    def _read_array(self, keep: bool) -> list[Any] | None:
        offset = self._reader.offset
        element = self._reader.read_sint8()
        length = self._read_count()
        if element == bgv.PROPERTY_DOUBLE:
            if not keep:
                self._reader.skip(length * 8)
                return None
            return [self._reader.read_float64() for _ in range(length)]
        if element == bgv.PROPERTY_INT:
            if not keep:
                self._reader.skip(length * 4)
                return None
            return [self._reader.read_sint32() for _ in range(length)]
        if element == bgv.PROPERTY_POOL:
            values = [self._read_pool_object() for _ in range(length)]
            return values if keep else None
        raise UnknownRecordTag(f"Unknown array element tag 0x{element & 0xFF:02x}", offset)

    # Pool objects

    def _read_string(self) -> str | None:
        length = self._reader.read_sint32()
        if length == -1:
            return None
        return self._reader.read_utf8(length)

    def _read_pool_object(self) -> PoolValue:
        offset = self._reader.offset
        tag = self._reader.read_sint8()
        if tag == bgv.POOL_NULL:
            return None
        if tag == bgv.POOL_NEW:
            id = self._reader.read_uint16()
            kind = self._reader.read_sint8()
            value = self._read_pool_payload(kind, offset)
            self.pool.define(id, value)
            return value
        if tag in bgv.POOL_REFERENCE_TAGS:
            id = self._reader.read_uint16()
            return self.pool.resolve(id, offset)
        raise UnknownRecordTag(f"Unknown pool tag 0x{tag & 0xFF:02x}", offset)

    def _read_pool_payload(self, kind: int, offset: int) -> PoolValue:
        if kind == bgv.POOL_STRING:
            return self._read_string()
        if kind == bgv.POOL_ENUM:
            enum_class = self._read_pool_object()
            ordinal = self._reader.read_sint32()
            return PoolEnum(enum_class, ordinal)
        if kind == bgv.POOL_CLASS:
            return self._read_class(offset)
        if kind == bgv.POOL_METHOD:
            declaring_class = self._read_pool_object()
            name = self._read_pool_object()
            signature = self._read_pool_object()
            modifiers = self._reader.read_sint32()
            code_length = self._reader.read_sint32()
            if code_length > 0:
                self._reader.skip(code_length)
            return PoolMethod(declaring_class, name, signature, modifiers, code_length)
        if kind == bgv.POOL_NODE_CLASS:
            return self._read_node_class()
        if kind == bgv.POOL_FIELD:
            field_class = self._read_pool_object()
            name = self._read_pool_object()
            type_name = self._read_pool_object()
            modifiers = self._reader.read_sint32()
            return PoolField(field_class, name, type_name, modifiers)
        if kind == bgv.POOL_SIGNATURE:
            count = self._reader.read_sint16()
            args = tuple(self._read_pool_object() for _ in range(count))
            return_type = self._read_pool_object()
            return PoolSignature(args, return_type)
        if kind == bgv.POOL_NODE_SOURCE_POSITION:
            return self._read_source_position()
        if kind == bgv.POOL_NODE:
            node_id = self._reader.read_sint32()
            node_class = self._read_pool_object()
            return PoolNodeRef(node_id, node_class)
        raise UnknownRecordTag(f"Unknown pool entry type 0x{kind & 0xFF:02x}", offset)

    def _read_class(self, offset: int) -> PoolClass:
        name = self._read_string() or ""
        kind = self._reader.read_sint8()
        if kind == bgv.KLASS:
            return PoolClass(name)
        if kind == bgv.ENUM_KLASS:
            count = self._read_count()
            values = tuple(self._read_pool_object() for _ in range(count))
            return PoolClass(name, values)
        raise UnknownRecordTag(f"Unknown class kind 0x{kind & 0xFF:02x}", offset)

    def _read_node_class(self) -> PoolNodeClass:
        node_class = self._read_pool_object()
        name_template = self._read_string() or ""

        inputs = []
        for _ in range(self._reader.read_sint16()):
            indirect = self._reader.read_sint8() != 0
            name = self._read_pool_object()
            input_type = self._read_pool_object()
            type_name = describe_value(input_type) if input_type is not None else None
            inputs.append(EdgeInfo(describe_value(name), indirect, type_name))

        outputs = []
        for _ in range(self._reader.read_sint16()):
            indirect = self._reader.read_sint8() != 0
            name = self._read_pool_object()
            outputs.append(EdgeInfo(describe_value(name), indirect))

        return PoolNodeClass(node_class, name_template, tuple(inputs), tuple(outputs))

    def _read_source_position(self) -> PoolSourcePosition:
        method = self._read_pool_object()
        bci = self._reader.read_sint32()
        locations = []
        while True:
            uri = self._read_pool_object()
            if uri is None:
                break
            location = self._read_string() or ""
            line = self._reader.read_sint32()
            start = self._reader.read_sint32()
            end = self._reader.read_sint32()
            locations.append(SourceLocation(describe_value(uri), location, line, start, end))
        caller = self._read_pool_object()
        return PoolSourcePosition(method, bci, tuple(locations), caller)
