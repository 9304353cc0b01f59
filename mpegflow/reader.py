"""Parse the text stream written by the raw and arranged emitters."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Union

import numpy as np

HeaderValue = Union[int, str]

# %4d fields carry no separator once a value needs five characters
_INTEGER = re.compile(r"-?\d+")


@dataclass
class OutputBlock:
    header: Dict[str, HeaderValue]
    values: np.ndarray = field(repr=False)
    occupancy_included: bool = False

    @property
    def output_type(self) -> str:
        return str(self.header.get("output_type", ""))

    @property
    def rows(self) -> int:
        if self.output_type == "raw":
            return len(self.values)
        return self.values.shape[0] // (3 if self.occupancy_included else 2)

    def _block(self, k: int) -> np.ndarray:
        if self.output_type != "arranged":
            raise ValueError("dx/dy/occupancy are only defined for arranged blocks")
        return self.values[k * self.rows : (k + 1) * self.rows]

    @property
    def dx(self) -> np.ndarray:
        return self._block(0)

    @property
    def dy(self) -> np.ndarray:
        return self._block(1)

    @property
    def occupancy(self) -> np.ndarray:
        if not self.occupancy_included:
            raise ValueError("stream was parsed without occupancy")
        return self._block(2)


def parse_header(line: str) -> Dict[str, HeaderValue]:
    header: Dict[str, HeaderValue] = {}
    for token in line.lstrip("#").split():
        key, sep, value = token.partition("=")
        if not sep:
            continue
        try:
            header[key] = int(value)
        except ValueError:
            header[key] = value
    return header


def _shape(header: Dict[str, HeaderValue]) -> tuple[int, int]:
    rows, _, cols = str(header["shape"]).partition("x")
    return int(rows), int(cols)


def parse_blocks(lines: Iterable[str], *, occupancy: bool = False) -> Iterator[OutputBlock]:
    """Yield one :class:`OutputBlock` per header line.

    Arranged blocks always carry ``H`` text rows of ``W`` integers.  Raw
    blocks carry as many rows as there were non-zero vectors, which may be
    fewer than the header's count.
    """

    header = None
    rows: List[List[int]] = []
    for line in lines:
        line = line.rstrip("\n")
        if line.startswith("#"):
            if header is not None:
                yield _finish(header, rows, occupancy)
            header = parse_header(line)
            rows = []
        elif header is not None and (line.strip() or header.get("output_type") == "arranged"):
            rows.append([int(v) for v in _INTEGER.findall(line)])
    if header is not None:
        yield _finish(header, rows, occupancy)


def _finish(header: Dict[str, HeaderValue], rows: List[List[int]], occupancy: bool) -> OutputBlock:
    if header.get("output_type") == "arranged":
        height, width = _shape(header)
        values = np.array(rows, dtype=np.int64).reshape(height, width)
    else:
        values = np.array(rows, dtype=np.int64).reshape(-1, 4)
    return OutputBlock(header=header, values=values, occupancy_included=occupancy)


def read_blocks(path: Path | str, *, occupancy: bool = False) -> List[OutputBlock]:
    with Path(path).open() as f:
        return list(parse_blocks(f, occupancy=occupancy))
