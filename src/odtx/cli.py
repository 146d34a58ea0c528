import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import structlog

from odtx.constants import DEFAULT_PARAGRAPH_STYLE
from odtx.document import Document
from odtx.errors import OdtError
from odtx.ingest import extract_text


def _configure_logging(verbose: bool):
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(stream=sys.stderr, level=level, force=True)
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def mode_extract(odt_path: Path, output: Optional[Path] = None) -> Path:
    print(f"📄 Extracting text from: {odt_path}")
    doc = Document(odt_path)
    doc.open()
    text = extract_text(doc)

    output = output or odt_path.with_suffix(".txt")
    with open(output, "w", encoding="utf-8") as f:
        f.write(text)

    print(f"✅ Saved to: {output}")
    return output


def mode_append(odt_path: Path, texts: List[str], style: str, output: Optional[Path] = None) -> Path:
    print(f"✏️  Appending {len(texts)} paragraph(s) to '{odt_path}'...")
    doc = Document(odt_path)
    doc.open()
    for text in texts:
        doc.add_paragraph(style).add_run(text)

    if output:
        doc.save_copy(output)
    else:
        doc.save()

    target = output or odt_path
    print(f"✅ Success! Saved to: {target}")
    return target


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="odtx", description="Read and edit OpenDocument Text files")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr")
    sub = parser.add_subparsers(dest="command", required=True)

    extract = sub.add_parser("extract", help="Write the document text to a .txt file")
    extract.add_argument("odt_file", type=Path)
    extract.add_argument("-o", "--output", type=Path, help="Output path (default: <odt_file>.txt)")

    append = sub.add_parser("append", help="Append paragraphs to the document body")
    append.add_argument("odt_file", type=Path)
    append.add_argument("texts", nargs="+", help="One paragraph per argument")
    append.add_argument("--style", default=DEFAULT_PARAGRAPH_STYLE, help="Paragraph style name")
    append.add_argument("-o", "--output", type=Path, help="Write a copy instead of editing in place")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    if not args.odt_file.exists():
        print(f"❌ Error: File {args.odt_file} not found.")
        return 1

    try:
        if args.command == "extract":
            mode_extract(args.odt_file, args.output)
        else:
            mode_append(args.odt_file, args.texts, args.style, args.output)
    except OdtError as e:
        print(f"❌ Error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
