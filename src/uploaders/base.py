"""Capability set shared by image host uploaders."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from src.models.upload import DeleteResult, UploadRequest, UploadResult


@runtime_checkable
class Uploader(Protocol):
    """An image host client that can upload and delete images."""

    def upload(self, req: UploadRequest) -> UploadResult: ...

    def delete(self, delete_hash: str) -> DeleteResult: ...

    def setup(self, config_file: Path | None = None) -> None: ...
