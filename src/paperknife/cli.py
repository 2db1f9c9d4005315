"""Command-line interface for paperknife."""

import argparse
import logging
import sys
from pathlib import Path

from paperknife.config import get_settings
from paperknife.documents.source import SourceDocument
from paperknife.exceptions import DocumentLockedError, PaperknifeError
from paperknife.pipeline import BatchOrchestrator, BatchSession
from paperknife.raster.quality import QualityTier
from paperknife.transformers import (
    CompressTransformer,
    DocumentTransformer,
    ExtractImagesTransformer,
    GrayscaleTransformer,
    ImageToPdfTransformer,
    MergeTransformer,
    MetadataTransformer,
    PageNumbersTransformer,
    PdfToImageTransformer,
    PdfToTextTransformer,
    ProtectTransformer,
    RasterRebuildTransformer,
    RearrangeTransformer,
    RepairTransformer,
    RotateTransformer,
    SignatureTransformer,
    SplitTransformer,
    UnlockTransformer,
    WatermarkTransformer,
    read_metadata,
)
from paperknife.transformers.page_numbers import DEFAULT_FORMAT, POSITIONS
from schemas.metadata import DocumentMetadata
from schemas.output import ToolOutput

DEFAULT_OUTPUT_DIR = Path(".")

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the CLI."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def load_source(path: Path, password: str | None = None) -> SourceDocument:
    """Read and open an input file.

    Raises:
        DocumentLockedError: If the file needs a password and none was given
    """
    source = SourceDocument.open(path.name, path.read_bytes(), password)
    if source.is_locked:
        source.close()
        raise DocumentLockedError(f"{path.name} is password protected (use --password)")
    return source


def write_output(output: ToolOutput, output_dir: Path) -> Path:
    """Write a tool output into ``output_dir`` and log what was written."""
    output_dir.mkdir(parents=True, exist_ok=True)
    target = output_dir / output.file_name
    target.write_bytes(output.data)

    logger.info(f"Wrote {target} ({output.size} bytes, {output.media_type})")
    for warning in output.warnings:
        logger.warning(f"  - {warning}")
    return target


def run_document_tool(args: argparse.Namespace, transformer: DocumentTransformer) -> int:
    """Run a single-document tool on ``args.input`` and write the result."""
    source = load_source(args.input, args.password)
    try:
        output = transformer.transform(source)
    finally:
        source.close()
    write_output(output, args.output)
    return 0


def run_batch(args: argparse.Namespace, transformer: RasterRebuildTransformer) -> int:
    """Run a batch-capable tool over every input file.

    Returns:
        0 if every file succeeded, 1 if any failed, was left locked, or no
        output was produced
    """
    session = BatchSession()
    orchestrator = BatchOrchestrator(transformer, archive_name=transformer.archive_name)
    try:
        for path in args.inputs:
            job = session.add_file(path.name, path.read_bytes(), args.password)
            if job.is_locked:
                reason = "incorrect password" if args.password else "password required"
                logger.warning(f"Skipping {path.name}: {reason}")

        result = orchestrator.run(
            session, on_progress=lambda value: logger.debug(f"Progress: {value}%")
        )
    finally:
        failed = session.failed_jobs
        skipped = session.locked_jobs
        session.reset()

    for job in failed:
        logger.error(f"{job.name}: {job.error}")
    if result.archive_error:
        logger.error(f"Archive failed: {result.archive_error}")
    if result.output is None:
        logger.error("No output produced")
        return 1

    write_output(result.output, args.output)
    return 1 if failed or skipped else 0


def compress(args: argparse.Namespace) -> int:
    return run_batch(args, CompressTransformer(tier=args.tier))


def grayscale(args: argparse.Namespace) -> int:
    return run_batch(args, GrayscaleTransformer())


def merge(args: argparse.Namespace) -> int:
    sources = [load_source(path, args.password) for path in args.inputs]
    try:
        output = MergeTransformer(file_name=args.name).transform(sources)
    finally:
        for source in sources:
            source.close()
    write_output(output, args.output)
    return 0


def split(args: argparse.Namespace) -> int:
    mode = "individual" if args.individual else "single"
    return run_document_tool(args, SplitTransformer(range_expression=args.pages, mode=mode))


def rearrange(args: argparse.Namespace) -> int:
    order = [int(part) for part in args.order.split(",") if part.strip()]
    return run_document_tool(args, RearrangeTransformer(order=order))


def rotate(args: argparse.Namespace) -> int:
    return run_document_tool(
        args, RotateTransformer(degrees=args.degrees, range_expression=args.pages)
    )


def watermark(args: argparse.Namespace) -> int:
    transformer = WatermarkTransformer(
        args.text,
        color=args.color,
        opacity=args.opacity,
        font_size=args.font_size,
        rotation=args.rotation,
    )
    return run_document_tool(args, transformer)


def page_numbers(args: argparse.Namespace) -> int:
    transformer = PageNumbersTransformer(
        label_format=args.format,
        start=args.start,
        position=args.position,
        margin=args.margin,
        font_size=args.font_size,
    )
    return run_document_tool(args, transformer)


def to_images(args: argparse.Namespace) -> int:
    return run_document_tool(args, PdfToImageTransformer(image_format=args.format))


def from_images(args: argparse.Namespace) -> int:
    images = [path.read_bytes() for path in args.inputs]
    output = ImageToPdfTransformer(file_name=args.name).transform(images)
    write_output(output, args.output)
    return 0


def extract_images(args: argparse.Namespace) -> int:
    return run_document_tool(args, ExtractImagesTransformer())


def metadata(args: argparse.Namespace) -> int:
    if args.clean:
        return run_document_tool(args, MetadataTransformer(deep_clean=True))

    source = load_source(args.input, args.password)
    try:
        current = read_metadata(source)
        updates = {
            field: getattr(args, field)
            for field in DocumentMetadata.model_fields
            if getattr(args, field) is not None
        }
        if not updates:
            for field, value in current.model_dump().items():
                print(f"{field}: {value}")
            return 0
        output = MetadataTransformer(current.model_copy(update=updates)).transform(source)
    finally:
        source.close()
    write_output(output, args.output)
    return 0


def protect(args: argparse.Namespace) -> int:
    confirm = args.confirm if args.confirm is not None else args.new_password
    return run_document_tool(args, ProtectTransformer(args.new_password, confirm))


def unlock(args: argparse.Namespace) -> int:
    path = args.input
    source = SourceDocument.open(path.name, path.read_bytes())
    try:
        output = UnlockTransformer(password=args.password).transform(source)
    finally:
        source.close()
    write_output(output, args.output)
    return 0


def repair(args: argparse.Namespace) -> int:
    return run_document_tool(args, RepairTransformer())


def to_text(args: argparse.Namespace) -> int:
    return run_document_tool(args, PdfToTextTransformer())


def sign(args: argparse.Namespace) -> int:
    transformer = SignatureTransformer(
        args.image.read_bytes(),
        page_id=args.page,
        x=args.x,
        y=args.y,
        width=args.width,
    )
    return run_document_tool(args, transformer)


def info(args: argparse.Namespace) -> int:
    path = args.input
    source = SourceDocument.open(path.name, path.read_bytes(), args.password)
    try:
        print(f"File: {path}")
        print(f"Size: {len(source.data)} bytes")
        if source.is_locked:
            print("Locked: yes (password required)")
            return 0
        print(f"Pages: {source.page_count}")
        if source.page_count:
            width, height = source.handle.page_size(1)
            print(f"Page 1 size: {width:.0f} x {height:.0f} pt")
        for field, value in read_metadata(source).model_dump().items():
            if value:
                print(f"{field.capitalize()}: {value}")
    finally:
        source.close()
    return 0


def _add_common(parser: argparse.ArgumentParser, multiple: bool = False) -> None:
    if multiple:
        parser.add_argument("inputs", type=Path, nargs="+", help="Input files")
    else:
        parser.add_argument("input", type=Path, help="Input PDF")
    parser.add_argument(
        "--output",
        type=Path,
        default=DEFAULT_OUTPUT_DIR,
        help=f"Output directory (default: {DEFAULT_OUTPUT_DIR})",
    )
    parser.add_argument(
        "--password",
        type=str,
        default=None,
        help="Password for protected input",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="paperknife",
        description="Transform PDF documents locally",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
    )

    compress_parser = subparsers.add_parser(
        "compress",
        help="Shrink PDFs by re-encoding their pages",
        description="Rasterize every page under a quality tier and rebuild the document. Several inputs produce one archive.",
    )
    _add_common(compress_parser, multiple=True)
    compress_parser.add_argument(
        "--tier",
        choices=[tier.value for tier in QualityTier],
        default=None,
        help=f"Quality tier (default: {get_settings().default_tier})",
    )
    compress_parser.set_defaults(func=compress)

    grayscale_parser = subparsers.add_parser(
        "grayscale",
        help="Convert PDFs to grayscale",
        description="Rasterize every page in gray and rebuild the document. Several inputs produce one archive.",
    )
    _add_common(grayscale_parser, multiple=True)
    grayscale_parser.set_defaults(func=grayscale)

    merge_parser = subparsers.add_parser("merge", help="Merge PDFs in the given order")
    _add_common(merge_parser, multiple=True)
    merge_parser.add_argument("--name", default="merged.pdf", help="Output file name")
    merge_parser.set_defaults(func=merge)

    split_parser = subparsers.add_parser("split", help="Extract pages")
    _add_common(split_parser)
    split_parser.add_argument("--pages", required=True, help='Page ranges, e.g. "1-3,5"')
    split_parser.add_argument(
        "--individual",
        action="store_true",
        help="Write each page as its own PDF (bundled in an archive)",
    )
    split_parser.set_defaults(func=split)

    rearrange_parser = subparsers.add_parser("rearrange", help="Reorder pages")
    _add_common(rearrange_parser)
    rearrange_parser.add_argument(
        "--order", required=True, help='New page order, e.g. "3,1,2"'
    )
    rearrange_parser.set_defaults(func=rearrange)

    rotate_parser = subparsers.add_parser("rotate", help="Rotate pages")
    _add_common(rotate_parser)
    rotate_parser.add_argument(
        "--degrees", type=int, default=90, help="Clockwise degrees, a multiple of 90 (default: 90)"
    )
    rotate_parser.add_argument("--pages", default=None, help="Page ranges (default: all)")
    rotate_parser.set_defaults(func=rotate)

    watermark_parser = subparsers.add_parser("watermark", help="Add a text watermark")
    _add_common(watermark_parser)
    watermark_parser.add_argument("--text", required=True, help="Watermark text")
    watermark_parser.add_argument("--color", default="#808080", help="Hex colour (default: #808080)")
    watermark_parser.add_argument("--opacity", type=float, default=0.3, help="Opacity 0-1 (default: 0.3)")
    watermark_parser.add_argument("--font-size", type=float, default=50, help="Font size (default: 50)")
    watermark_parser.add_argument("--rotation", type=float, default=45, help="Angle in degrees (default: 45)")
    watermark_parser.set_defaults(func=watermark)

    numbers_parser = subparsers.add_parser("page-numbers", help="Number pages")
    _add_common(numbers_parser)
    numbers_parser.add_argument(
        "--format", default=DEFAULT_FORMAT, help=f'Label with {{n}} and {{total}} (default: "{DEFAULT_FORMAT}")'
    )
    numbers_parser.add_argument("--start", type=int, default=1, help="First page number (default: 1)")
    numbers_parser.add_argument("--position", choices=POSITIONS, default="bottom-center")
    numbers_parser.add_argument("--margin", type=float, default=30, help="Edge margin in points (default: 30)")
    numbers_parser.add_argument("--font-size", type=float, default=12, help="Font size (default: 12)")
    numbers_parser.set_defaults(func=page_numbers)

    to_images_parser = subparsers.add_parser("to-images", help="Export pages as images")
    _add_common(to_images_parser)
    to_images_parser.add_argument("--format", choices=["jpeg", "png"], default="jpeg")
    to_images_parser.set_defaults(func=to_images)

    from_images_parser = subparsers.add_parser("from-images", help="Build a PDF from JPEG/PNG images")
    _add_common(from_images_parser, multiple=True)
    from_images_parser.add_argument("--name", default=None, help="Output file name")
    from_images_parser.set_defaults(func=from_images)

    extract_parser = subparsers.add_parser("extract-images", help="Extract embedded images")
    _add_common(extract_parser)
    extract_parser.set_defaults(func=extract_images)

    metadata_parser = subparsers.add_parser(
        "metadata",
        help="Show, edit or strip document metadata",
        description="Without field options, print the current metadata.",
    )
    _add_common(metadata_parser)
    for field in DocumentMetadata.model_fields:
        metadata_parser.add_argument(f"--{field}", default=None, help=f"New {field}")
    metadata_parser.add_argument(
        "--clean", action="store_true", help="Remove all metadata, including XMP"
    )
    metadata_parser.set_defaults(func=metadata)

    protect_parser = subparsers.add_parser("protect", help="Encrypt with a password (AES-256)")
    _add_common(protect_parser)
    protect_parser.add_argument("--new-password", required=True, help="Password to set")
    protect_parser.add_argument("--confirm", default=None, help="Repeat the password")
    protect_parser.set_defaults(func=protect)

    unlock_parser = subparsers.add_parser("unlock", help="Remove password protection")
    _add_common(unlock_parser)
    unlock_parser.set_defaults(func=unlock)

    repair_parser = subparsers.add_parser("repair", help="Rebuild a damaged PDF")
    _add_common(repair_parser)
    repair_parser.set_defaults(func=repair)

    text_parser = subparsers.add_parser("to-text", help="Extract text page by page")
    _add_common(text_parser)
    text_parser.set_defaults(func=to_text)

    sign_parser = subparsers.add_parser("sign", help="Place a signature image")
    _add_common(sign_parser)
    sign_parser.add_argument("--image", type=Path, required=True, help="PNG or JPEG signature")
    sign_parser.add_argument("--page", type=int, default=1, help="Target page; -1 is the last (default: 1)")
    sign_parser.add_argument("--x", type=float, default=60, help="Left edge, percent of width (default: 60)")
    sign_parser.add_argument("--y", type=float, default=80, help="Top edge, percent of height (default: 80)")
    sign_parser.add_argument("--width", type=float, default=25, help="Width, percent of page width (default: 25)")
    sign_parser.set_defaults(func=sign)

    info_parser = subparsers.add_parser("info", help="Show page count and metadata")
    info_parser.add_argument("input", type=Path, help="Input PDF")
    info_parser.add_argument("--password", default=None, help="Password for protected input")
    info_parser.set_defaults(func=info)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    setup_logging(args.verbose)
    try:
        return args.func(args)
    except PaperknifeError as e:
        logger.error(f"{args.command} failed: {e.message}")
        return 1
    except Exception as e:
        logger.error(f"{args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
