"""Shared fixtures: the fib dump as bytes, as a file and as a GraphFile."""

from pathlib import Path

import pytest
from bgv_writer import fib_document

from graphdump.bgv import GraphFile


@pytest.fixture
def fib_bytes() -> bytes:
    return fib_document()


@pytest.fixture
def fib_path(tmp_path: Path) -> Path:
    path = tmp_path / "fib.bgv"
    path.write_bytes(fib_document())
    return path


@pytest.fixture
def fib_gz_path(tmp_path: Path) -> Path:
    path = tmp_path / "fib.bgv.gz"
    path.write_bytes(fib_document(compress=True))
    return path


@pytest.fixture
def fib_dump(fib_path: Path) -> GraphFile:
    return GraphFile(fib_path)
