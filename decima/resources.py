"""Geometry resources: vertex arrays, index arrays and primitives."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any

from decima.buffer import Buffer
from decima.guid import GUID
from decima.objects import CoreObject, read_array
from decima.reference import Ref


class IndexFormat(enum.IntEnum):
    """Width of the indices in an index array."""

    INDEX16 = 0
    INDEX32 = 1


@dataclass
class VertexStreamData:
    """Describes one element of a vertex layout."""

    offset: int = 0
    storage_type: int = 0
    slots_used: int = 0
    element_type: int = 0

    @classmethod
    def parse(cls, buffer: Buffer) -> VertexStreamData:
        """Consume the four single-byte fields of an element."""
        return cls(*buffer.read_struct("4B"))


@dataclass
class VertexStreamInfo:
    """One vertex stream: stride, element layout and the data's identifier."""

    flags: int = 0
    stride: int = 0
    descriptors: list[VertexStreamData] = field(default_factory=list)
    resource_uuid: GUID = field(default_factory=GUID)

    @classmethod
    def parse(cls, buffer: Buffer, file: Any) -> VertexStreamInfo:
        """Consume a stream description."""
        flags, stride = buffer.read_struct("II")
        descriptors = read_array(buffer, VertexStreamData.parse)
        return cls(flags, stride, descriptors, GUID.parse(buffer))


@dataclass(eq=False)
class VertexArrayResource(CoreObject):
    """The vertex streams of a mesh."""

    vertex_count: int = 0
    vertex_stream_count: int = 0
    is_streaming: bool = False
    vertex_stream_info: list[VertexStreamInfo] = field(default_factory=list)

    def parse(self, manager: Any, buffer: Buffer, file: Any) -> None:
        super().parse(manager, buffer, file)
        self.vertex_count, self.vertex_stream_count, is_streaming = buffer.read_struct("IIB")
        self.is_streaming = bool(is_streaming)
        self.vertex_stream_info = [
            VertexStreamInfo.parse(buffer, file) for _ in range(self.vertex_stream_count)
        ]


@dataclass(eq=False)
class IndexArrayResource(CoreObject):
    """The index buffer of a mesh; an empty one stores no further fields."""

    indices_count: int = 0
    flags: int = 0
    index_type: IndexFormat | int = IndexFormat.INDEX16
    is_streaming: bool = False
    resource_uuid: GUID = field(default_factory=GUID)

    def parse(self, manager: Any, buffer: Buffer, file: Any) -> None:
        super().parse(manager, buffer, file)
        self.indices_count = buffer.read_struct("I")
        if self.indices_count > 0:
            self.flags, index_type, is_streaming = buffer.read_struct("IIB")
            try:
                self.index_type = IndexFormat(index_type)
            except ValueError:
                self.index_type = index_type
            self.is_streaming = bool(is_streaming)
            self.resource_uuid = GUID.parse(buffer)


@dataclass(frozen=True)
class BoundingBox:
    """An axis-aligned box given by its minimum and maximum corners."""

    minimum: tuple[float, float, float] = (0.0, 0.0, 0.0)
    maximum: tuple[float, float, float] = (0.0, 0.0, 0.0)

    def __str__(self) -> str:
        low = ", ".join(f"{v:g}" for v in self.minimum)
        high = ", ".join(f"{v:g}" for v in self.maximum)
        return f"({low}) - ({high})"


@dataclass(eq=False)
class PrimitiveResource(CoreObject):
    """A drawable primitive tying vertex and index arrays together."""

    flags: int = 0
    vertex_array: Ref = field(default_factory=Ref)
    index_array: Ref = field(default_factory=Ref)
    bounding_box: BoundingBox = field(default_factory=BoundingBox)
    skd_tree: Ref = field(default_factory=Ref)
    start_index: int = 0
    end_index: int = 0
    hash: int = 0

    def parse(self, manager: Any, buffer: Buffer, file: Any) -> None:
        super().parse(manager, buffer, file)
        self.flags = buffer.read_struct("I")
        self.vertex_array = Ref.parse(buffer, file)
        self.index_array = Ref.parse(buffer, file)
        values = buffer.read_struct("6f")
        self.bounding_box = BoundingBox(tuple(values[:3]), tuple(values[3:]))
        self.skd_tree = Ref.parse(buffer, file)
        self.start_index, self.end_index, self.hash = buffer.read_struct("III")