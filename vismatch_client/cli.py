"""``vismatch`` command-line front end.

Thin driver over the client services: compare one image, upload a batch
of images, or delete a project.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence

from vismatch_client.config import get_settings
from vismatch_client.exceptions import ReadError, RequestFailure, ValidationError
from vismatch_client.logging_config import setup_logging
from vismatch_client.models.upload import UploadEntry, UploadStatus
from vismatch_client.services.api_client import ApiClient
from vismatch_client.services.codec import Codec
from vismatch_client.services.compare_runner import CompareRunner
from vismatch_client.services.upload_orchestrator import UploadOrchestrator
from vismatch_client.services.upload_queue import UploadQueue

logger = logging.getLogger(__name__)

STATUS_MARKERS: dict[UploadStatus, str] = {
    UploadStatus.PENDING: " ",
    UploadStatus.UPLOADING: "~",
    UploadStatus.SUCCESS: "+",
    UploadStatus.ERROR: "x",
}


def positive_int(value: str) -> int:
    """argparse type for integers of 1 or more."""
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be 1 or more, got {value}")
    return number


def setup_arg_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the ``vismatch`` command."""
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="vismatch",
        description="Client for the vismatch image similarity service",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--api-url", default=settings.api_url,
                        help="Base URL of the similarity service.")
    parser.add_argument("--timeout", type=float, default=settings.request_timeout,
                        help="Per-request timeout in seconds.")
    parser.add_argument("--log-level", default=settings.log_level,
                        help="Logging level (DEBUG, INFO, WARNING, ...).")

    commands = parser.add_subparsers(dest="command", required=True)

    compare = commands.add_parser("compare", help="Find images similar to a query image.")
    compare.add_argument("project", help="Project to search.")
    compare.add_argument("image", help="Query image path or URL.")
    compare.add_argument("--no-image", action="store_true",
                         help="Do not ask the server to return matched image data.")
    compare.add_argument("--top", type=positive_int, default=None,
                         help="Only print the first N matches.")

    upload = commands.add_parser("upload", help="Upload images into a project.")
    upload.add_argument("project", help="Project to upload into.")
    upload.add_argument("images", nargs="+", help="Image paths or URLs.")

    delete = commands.add_parser("delete-project", help="Delete a project and its images.")
    delete.add_argument("project", help="Project to delete.")

    return parser


def _print_entry(entry: UploadEntry) -> None:
    line = f"[{STATUS_MARKERS[entry.status]}] {entry.image_name}"
    if entry.message:
        line += f": {entry.message}"
    print(line)


async def handle_compare(args: argparse.Namespace, api_client: ApiClient, codec: Codec) -> int:
    await codec.validate_image(args.image)
    runner = CompareRunner(api_client, codec)
    outcome = await runner.run(args.project, args.image, with_image=not args.no_image)
    if not outcome.success:
        print(outcome.message, file=sys.stderr)
        return 1

    print(outcome.message)
    matches = outcome.results if args.top is None else outcome.results[: args.top]
    for rank, match in enumerate(matches, start=1):
        print(f"#{rank:<3} {match.distance:>8.2f}  {match.image_name}")
    return 0


async def handle_upload(args: argparse.Namespace, api_client: ApiClient, codec: Codec) -> int:
    for image in args.images:
        await codec.validate_image(image)

    queue = UploadQueue()
    queue.add(args.images)

    async with UploadOrchestrator(api_client, codec, cleanup_delay=0) as orchestrator:
        summary = await orchestrator.run(args.project, queue)

    for entry in summary.entries:
        _print_entry(entry)
    print(summary.message)
    return 0 if summary.error_count == 0 else 1


async def handle_delete_project(args: argparse.Namespace, api_client: ApiClient, codec: Codec) -> int:
    if not args.project.strip():
        raise ValidationError("Project name is required")
    response = await api_client.delete_project(args.project)
    print(response.message, file=sys.stdout if response.success else sys.stderr)
    return 0 if response.success else 1


HANDLERS = {
    "compare": handle_compare,
    "upload": handle_upload,
    "delete-project": handle_delete_project,
}


async def _run(args: argparse.Namespace) -> int:
    async with ApiClient(args.api_url, timeout=args.timeout) as api_client:
        return await HANDLERS[args.command](args, api_client, Codec())


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the ``vismatch`` command; returns the exit status."""
    args = setup_arg_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        return asyncio.run(_run(args))
    except (ValidationError, ReadError, RequestFailure) as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1
