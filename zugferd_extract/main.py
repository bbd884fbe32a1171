"""
zugferd-extract Kommandozeile
Extrahiert die eingebettete E-Rechnung (Factur-X/ZUGFeRD/XRechnung XML) aus einem PDF
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .core.config import settings
from .core.errors import ExtractionError
from .schemas.attachment import ResolutionPolicy
from .services.extraction.extractor import extract_attachment
from .services.extraction.inspector import inspect_document
from .services.extraction.pdf_util import PypdfDocument

logger = logging.getLogger(__name__)


def attachment_name(value: str) -> str:
    """argparse Typ für --name: leere Namen sind ein Usage-Fehler."""
    if not value.strip():
        raise argparse.ArgumentTypeError("attachment name must not be empty")
    return value


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog=settings.app_name,
        description="Extract the embedded e-invoice XML (Factur-X/ZUGFeRD/XRechnung) from a PDF file",
    )
    parser.add_argument("pdf_input", type=Path, help="PDF input file")
    parser.add_argument(
        "attachment_output",
        type=Path,
        nargs="?",
        help=f"Attachment output path (default = pdf_input with {settings.output_suffix} extension)",
    )
    parser.add_argument(
        "-n", "--name",
        type=attachment_name,
        help="Name of the attachment to extract (default: derived from /Metadata or "
             + " / ".join(settings.default_attachment_names) + ")",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Print additional info to the console")
    parser.add_argument(
        "-s", "--strict",
        action="store_true",
        help="Exit with an error if the file is not a valid e-invoice. "
             "Without it the tool tries to extract any .xml attachment",
    )
    parser.add_argument(
        "--inspect",
        action="store_true",
        help="Print a JSON report of /Metadata, /AF and /EmbeddedFiles instead of extracting",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {settings.app_version}")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    # Logging konfigurieren
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    def report(message: str) -> None:
        if args.verbose:
            print(message)

    policy = ResolutionPolicy.STRICT if args.strict else ResolutionPolicy.LENIENT

    try:
        if args.inspect:
            document = PypdfDocument.open(args.pdf_input.resolve())
            print(inspect_document(document).model_dump_json(indent=2))
        else:
            extract_attachment(
                args.pdf_input,
                args.attachment_output,
                name=args.name,
                policy=policy,
                report=report,
            )
    except ExtractionError as e:
        logger.debug(f"Extraktion fehlgeschlagen: {e.kind.value} (Exit-Code {e.exit_code})")
        print(e.message, file=sys.stderr)
        return e.exit_code

    return 0


if __name__ == "__main__":
    sys.exit(main())
