"""References from one core object to another."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any

from decima.buffer import Buffer
from decima.guid import GUID
from decima.strings import read_string


class RefLoadMode(enum.IntEnum):
    """How the target of a reference is to be loaded."""

    NOT_PRESENT = 0
    EMBEDDED = 1
    IMMEDIATE_CORE_FILE = 2
    CORE_FILE = 3
    WORK_ONLY = 4


@dataclass(eq=False)
class Ref:
    """A reference to an object, possibly in another core file."""

    mode: RefLoadMode = RefLoadMode.NOT_PRESENT
    guid: GUID = field(default_factory=GUID)
    file: str = ""
    owner: Any = None
    object: Any = None

    @classmethod
    def parse(cls, buffer: Buffer, file: Any) -> Ref:
        """Consume a reference and queue it on ``file`` for resolution."""
        owner = file.objects[-1][0] if file.objects else None
        ref = cls(mode=RefLoadMode(buffer.read_struct("B")), owner=owner)
        if ref.mode != RefLoadMode.NOT_PRESENT:
            ref.guid = GUID.parse(buffer)
        if ref.mode >= RefLoadMode.IMMEDIATE_CORE_FILE:
            ref.file = read_string(buffer)
        file.queue_reference(ref)
        return ref

    def resolved(self) -> bool:
        """Whether the referenced object has been found."""
        return self.object is not None