from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AttachmentUpload:
    """A file handed over by the composer before it becomes an Attachment."""

    name: str
    mime_type: str
    data: bytes = b""

    @property
    def size_bytes(self) -> int:
        return len(self.data)

