"""Image file collection utilities."""

from __future__ import annotations

import base64
import mimetypes
from pathlib import Path

from rich.console import Console

from src.uploaders.errors import EncodingError

console = Console()

# Image types accepted by the upload endpoint
SUPPORTED_IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.gif', '.apng', '.tiff', '.tif', '.bmp', '.webp'}


def is_supported_image(file_path: Path) -> bool:
    """Check whether a path points to an image file we can upload."""
    return file_path.is_file() and file_path.suffix.lower() in SUPPORTED_IMAGE_EXTENSIONS


def guess_mime_type(file_path: Path) -> str:
    return mimetypes.guess_type(file_path.name)[0] or "application/octet-stream"


def collect_image_files(folder_path: Path) -> list[Path]:
    """
    Collect all image files from a folder with supported extensions.

    Args:
        folder_path: Path to the folder to scan

    Returns:
        list[Path]: List of image file paths, sorted by name
    """
    if not folder_path.exists() or not folder_path.is_dir():
        console.print(f"[red]Warning: Folder does not exist or is not a directory: {folder_path}[/red]")
        return []

    image_files = [file_path for file_path in folder_path.iterdir() if is_supported_image(file_path)]

    # Sort files by name for consistent ordering
    image_files.sort(key=lambda x: x.name.lower())

    if not image_files:
        console.print(f"[yellow]Warning: No image files found in folder: {folder_path}[/yellow]")

    return image_files


def expand_image_paths(paths: list[Path]) -> list[Path]:
    """
    Expand a mix of image files and folders into a flat list of images.

    Folders contribute every supported image they directly contain; files
    with unsupported extensions are skipped with a warning.

    Args:
        paths: Files and folders given on the command line

    Returns:
        list[Path]: Image files in the order given
    """
    images: list[Path] = []
    for path in paths:
        if path.is_dir():
            images.extend(collect_image_files(path))
        elif is_supported_image(path):
            images.append(path)
        else:
            console.print(f"[yellow]Warning: Skipping unsupported or missing file: {path}[/yellow]")
    return images


def encode_image_base64(file_path: Path) -> str:
    """
    Read an image file and return its contents as base64 text.

    Raises:
        EncodingError: If the file cannot be read
    """
    try:
        raw = file_path.read_bytes()
    except OSError as e:
        raise EncodingError(f"Failed to read image {file_path}: {e}") from e
    return base64.b64encode(raw).decode("ascii")
