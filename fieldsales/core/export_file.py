"""Encoded report download, shared by the export encoder and the HTTP client."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ExportFile:
    content: bytes
    filename: str
    mimetype: str

    @property
    def content_disposition(self) -> str:
        return f'attachment; filename="{self.filename}"'
