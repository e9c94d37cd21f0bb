"""GraphFile: list and load the graphs of one BGV document."""

from __future__ import annotations

import io
import logging
import os
from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO, Union

from graphdump.bgv.builder import GraphBuilder
from graphdump.bgv.decoder import StreamDecoder
from graphdump.bgv.pool import ConstantPool
from graphdump.bgv.records import GraphBegin
from graphdump.core.exceptions import GraphNotFound
from graphdump.core.graph import Graph

logger = logging.getLogger(__name__)

FileSource = Union[str, os.PathLike, bytes, bytearray, BinaryIO]


class GraphFile:
    """A BGV document that can be indexed and read one graph at a time.

    Every read opens a fresh decoder with a fresh constant pool, so no pool
    state leaks between reads or between files. The header index (graph
    names and byte offsets) is computed once and then reused.

    A seekable file object is rewound to its starting position for each read
    rather than copied into memory, so reads on one GraphFile must not be
    interleaved (for example, calling ``read_graph`` while iterating
    ``graphs()``). A non-seekable stream is read once into memory.
    """

    def __init__(self, source: FileSource, lenient: bool = False) -> None:
        self.path: Path | None = None
        self._data: bytes | None = None
        self._stream: BinaryIO | None = None
        self._start = 0
        if isinstance(source, (str, os.PathLike)):
            self.path = Path(source)
        elif isinstance(source, (bytes, bytearray)):
            self._data = bytes(source)
        elif source.seekable():
            self._stream = source
            self._start = source.tell()
        else:
            self._data = source.read()
        self.lenient = lenient
        self._headers: list[GraphBegin] | None = None
        self._version: tuple[int, int] | None = None

    def __repr__(self) -> str:
        if self.path is not None:
            where = str(self.path)
        elif self._stream is not None:
            where = repr(self._stream)
        else:
            where = f"<{len(self._data or b'')} bytes>"
        return f"GraphFile({where})"

    def open_decoder(self) -> StreamDecoder:
        """A new decoder positioned at the start of the document."""
        source: FileSource
        if self.path is not None:
            source = self.path
        elif self._stream is not None:
            self._stream.seek(self._start)
            source = self._stream
        else:
            source = io.BytesIO(self._data or b"")
        return StreamDecoder(source, ConstantPool(), lenient=self.lenient)

    @property
    def version(self) -> tuple[int, int]:
        if self._version is None:
            with self.open_decoder() as decoder:
                self._version = decoder.read_header()
        return self._version

    def graph_headers(self) -> list[GraphBegin]:
        """Headers of every graph, in file order. Scans the file once."""
        if self._headers is None:
            headers = []
            with self.open_decoder() as decoder:
                self._version = decoder.read_header()
                while True:
                    header = decoder.next_graph()
                    if header is None:
                        break
                    headers.append(header)
                    decoder.skip_graph()
            logger.debug("Indexed %d graphs in %r", len(headers), self)
            self._headers = headers
        return self._headers

    @property
    def offsets(self) -> list[int]:
        """Byte offset of each graph's record block in the decompressed stream."""
        return [header.offset for header in self.graph_headers()]

    def __len__(self) -> int:
        return len(self.graph_headers())

    def read_graph(self, index: int) -> Graph:
        """Decode graph ``index`` only, skipping the graphs before it."""
        if self._headers is not None and not 0 <= index < len(self._headers):
            raise GraphNotFound(f"Graph {index} not found, file has {len(self._headers)} graphs")
        with self.open_decoder() as decoder:
            header = decoder.seek_to_graph(index)
            logger.debug("Reading graph %d (%s)", header.index, header.name)
            return GraphBuilder(header).build(decoder.graph_records())

    def graphs(self) -> Iterator[Graph]:
        """Decode every graph sequentially."""
        with self.open_decoder() as decoder:
            while True:
                header = decoder.next_graph()
                if header is None:
                    return
                yield GraphBuilder(header).build(decoder.graph_records())
