#!/usr/bin/env python3
"""
Imgur Upload Script

A command-line tool for uploading images to Imgur and deleting them again.
Accepts image files and folders of images, uploads each one through the
Imgur v3 API and prints the returned link and delete hash.

Usage:
    uv run main.py image.png [more images or folders ...]
    uv run main.py --delete DELETEHASH
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

from rich.console import Console

from src.config.settings import ClientConfig
from src.models.upload import UploadRequest
from src.parsers.image_collector import expand_image_paths, guess_mime_type
from src.progress.tracker import ProgressTracker
from src.uploaders.errors import ImgurError
from src.uploaders.imgur import ImgurUploader

# Initialize Rich console for output
console = Console()


def load_config(config_file: Path | None) -> ClientConfig | None:
    """
    Load client credentials from a config file or the environment.

    Args:
        config_file: dotenv-format config file, or None to use IMGUR_CLIENT_ID

    Returns:
        ClientConfig if credentials were found, None otherwise
    """
    try:
        if config_file is not None:
            config = ClientConfig.from_file(config_file)
        else:
            config = ClientConfig.from_env()
    except ImgurError as e:
        console.print(f"[red]Error: {e}[/red]")
        console.print("Please create a .env file with your Imgur client ID:")
        console.print("IMGUR_CLIENT_ID=your_client_id_here")
        return None

    console.print("[green]✓[/green] Imgur client ID loaded successfully")
    return config


def parse_arguments() -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        description="Upload images to Imgur",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  uv run main.py cat.png                     # Upload one image
  uv run main.py ./screenshots --stream      # Stream every image in a folder
  uv run main.py --delete AbCdEf123          # Delete an uploaded image
  uv run main.py --config config/imgur.env --test
        """
    )

    _ = parser.add_argument(
        "paths",
        nargs="*",
        type=Path,
        help="Image files or folders of images to upload"
    )

    _ = parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="dotenv-format config file with ClientID (default: IMGUR_CLIENT_ID from the environment)"
    )

    _ = parser.add_argument("--album", default="", help="Album ID to add the images to")
    _ = parser.add_argument("--title", default="", help="Title for the uploaded images")
    _ = parser.add_argument("--description", default="", help="Description for the uploaded images")

    _ = parser.add_argument(
        "--stream",
        action="store_true",
        help="Stream files as multipart uploads with a progress bar"
    )

    _ = parser.add_argument(
        "--delete",
        metavar="DELETEHASH",
        help="Delete the image with this delete hash and exit"
    )

    _ = parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Timeout in seconds for each request (default: none)"
    )

    _ = parser.add_argument(
        "--test",
        action="store_true",
        help="Validate configuration and exit"
    )

    _ = parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output for debugging"
    )

    return parser.parse_args()


def upload_image(
    uploader: ImgurUploader,
    tracker: ProgressTracker,
    image_path: Path,
    args: argparse.Namespace,
) -> None:
    """Upload one image and record the result.

    Args:
        uploader: Configured Imgur uploader
        tracker: Progress tracker collecting results
        image_path: Image file to upload
        args: Parsed command-line arguments
    """
    if args.stream:
        with tracker.track_upload(image_path.name) as progress:
            result = uploader.upload_file(
                image_path,
                album=args.album,
                name=image_path.name,
                title=args.title,
                description=args.description,
                progress_callback=progress.update,
            )
    else:
        request = UploadRequest.from_file(
            image_path,
            album=args.album,
            type="base64",
            name=image_path.name,
            title=args.title,
            description=args.description,
        )
        with console.status(f"Uploading {image_path.name} ({guess_mime_type(image_path)})..."):
            result = uploader.upload(request)

    tracker.record_result(image_path.name, result)


def main() -> None:
    """Main entry point for the Imgur upload script."""
    start_time = time.time()

    console.print("[bold blue]Imgur Upload Script[/bold blue]\n")

    args = parse_arguments()

    verbose_mode: bool = getattr(args, 'verbose', False)
    if verbose_mode:
        console.print("[dim]Verbose mode enabled[/dim]")

    config = load_config(args.config)
    if config is None:
        sys.exit(1)

    if args.test:
        console.print(f"[green]✓ Configuration valid, uploading to {config.upload_url}[/green]")
        sys.exit(0)

    uploader = ImgurUploader(config, timeout=args.timeout)
    tracker = ProgressTracker(console)

    if args.delete:
        try:
            delete_result = uploader.delete(args.delete)
        except ImgurError as e:
            tracker.display_error(f"Failed to delete {args.delete}", e)
            sys.exit(1)
        tracker.display_delete_result(args.delete, delete_result)
        sys.exit(0 if delete_result.error is None and delete_result.success else 1)

    images = expand_image_paths(args.paths)
    if not images:
        console.print("[red]Error: No images to upload.[/red]")
        sys.exit(1)

    tracker.display_info(f"Uploading {len(images)} image(s) to {config.upload_url}")

    try:
        for image_path in images:
            try:
                upload_image(uploader, tracker, image_path, args)
            except ImgurError as e:
                tracker.failed += 1
                tracker.display_error(f"Failed to upload {image_path.name}", e)
                if verbose_mode:
                    import traceback
                    console.print(f"[dim]{traceback.format_exc()}[/dim]")
    except KeyboardInterrupt:
        tracker.display_warning("Upload interrupted by user.")
        tracker.display_upload_summary()
        sys.exit(1)

    tracker.display_upload_summary()
    console.print(f"[yellow]Processing time:[/yellow] {time.time() - start_time:.1f} seconds")

    if tracker.failed:
        sys.exit(1)


if __name__ == "__main__":
    main()
