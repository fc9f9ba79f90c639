"""Progress tracking with Rich progress bars."""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, final

from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
    TransferSpeedColumn,
)
from rich.table import Table

from src.models.upload import DeleteResult, ErrorData, SuccessData, UploadResult


@final
class ProgressTracker:
    """Reports upload progress and results on the console."""

    def __init__(self, console: Console | None = None) -> None:
        """Initialize the progress tracker.

        Args:
            console: Rich console instance. If None, creates a new one.
        """
        self.console = console or Console()
        self.uploaded = 0
        self.failed = 0

    @contextmanager
    def track_upload(self, file_name: str) -> Iterator[UploadProgressContext]:
        """Context manager for tracking the bytes sent for one file.

        Args:
            file_name: Name of the file being uploaded

        Yields:
            Context whose ``update`` matches the uploader's progress callback
        """
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            DownloadColumn(),
            TransferSpeedColumn(),
            TimeElapsedColumn(),
            console=self.console,
            transient=True,
        ) as progress:
            task_id = progress.add_task(f"Uploading {file_name}...", total=None)
            yield UploadProgressContext(progress, task_id)

    def record_result(self, file_name: str, result: UploadResult) -> None:
        """Count an upload result and print its summary table."""
        if result.ok:
            self.uploaded += 1
        else:
            self.failed += 1
        self.display_result(file_name, result)

    def display_result(self, file_name: str, result: UploadResult) -> None:
        """Display the decoded response of an upload.

        Args:
            file_name: Name of the uploaded file
            result: Decoded upload response
        """
        data = result.data
        if isinstance(data, SuccessData):
            table = Table(title=f"Uploaded {file_name}")
            table.add_column("Field", style="cyan")
            table.add_column("Value", style="green")

            table.add_row("ID", data.id)
            table.add_row("Link", data.link)
            table.add_row("Type", data.type)
            table.add_row("Size", f"{data.width}x{data.height}, {data.size} bytes")
            created = datetime.fromtimestamp(data.datetime, tz=timezone.utc)
            table.add_row("Created", created.isoformat())
            if data.title:
                table.add_row("Title", data.title)
            if data.deletehash:
                table.add_row("Delete hash", data.deletehash)
            self.console.print(table)
        else:
            self.display_remote_error(file_name, result.http_status, data)

    def display_delete_result(self, delete_hash: str, result: DeleteResult) -> None:
        if result.error is None and result.success:
            self.display_success(f"Deleted image {delete_hash}")
        elif result.error is not None:
            self.display_remote_error(delete_hash, result.http_status, result.error)
        else:
            self.display_error(f"Image {delete_hash} was not deleted (status {result.status})")

    def display_remote_error(self, subject: str, http_status: int, error: ErrorData) -> None:
        """Display an error reported by the remote service.

        Args:
            subject: File name or delete hash the request was about
            http_status: HTTP status code of the response
            error: Decoded error payload
        """
        self.console.print(
            f"[red]Error: {subject} rejected with HTTP {http_status}: {error.error}[/red]"
        )
        if error.request or error.method:
            self.console.print(f"[dim]Request: {error.method} {error.request}[/dim]")

    def display_upload_summary(self) -> None:
        """Display a summary of the upload session."""
        table = Table(title="Upload Summary")
        table.add_column("Metric", style="cyan")
        table.add_column("Count", style="green")

        table.add_row("Images Uploaded", str(self.uploaded))
        table.add_row("Images Failed", str(self.failed))

        self.console.print("\n")
        self.console.print(table)

    def display_error(self, message: str, exception: Exception | None = None) -> None:
        """Display an error message with optional exception details.

        Args:
            message: Error message to display
            exception: Optional exception for additional context
        """
        self.console.print(f"[red]Error: {message}[/red]")
        if exception:
            self.console.print(f"[dim]Details: {exception}[/dim]")

    def display_warning(self, message: str) -> None:
        self.console.print(f"[yellow]Warning: {message}[/yellow]")

    def display_success(self, message: str) -> None:
        self.console.print(f"[green]Success: {message}[/green]")

    def display_info(self, message: str) -> None:
        self.console.print(f"[blue]Info: {message}[/blue]")


@final
class UploadProgressContext:
    """Context for tracking the bytes of one streamed upload."""

    def __init__(self, progress: Progress, task_id: TaskID) -> None:
        """Initialize the context.

        Args:
            progress: Rich Progress instance
            task_id: Task ID for the progress bar
        """
        self.progress = progress
        self.task_id = task_id

    def update(self, bytes_sent: int, total_bytes: int) -> None:
        """Update the progress bar.

        Args:
            bytes_sent: Bytes of the request body sent so far
            total_bytes: Size of the whole request body
        """
        self.progress.update(self.task_id, completed=bytes_sent, total=total_bytes)
