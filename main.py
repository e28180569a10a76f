#!/usr/bin/env python3
"""
Document Record Extraction Engine - Main Entry Point.

Command-line access to the extraction engine. Every command prints its
result as JSON on stdout; logs go to stderr.

Usage:
    Pattern extraction over a text file:
        python main.py extract --text receipt.txt

    Full job over local page files:
        python main.py run scans/p1.jpg --owner me --text ocr.txt
        python main.py run scans/p1.jpg --owner me --mode model-assisted \\
            --provider anthropic --api-key-env ANTHROPIC_API_KEY

    External extractor command:
        python main.py local scans/receipt.jpg --command "python my_extractor.py"

Author: ML Engineering Team
Version: 1.0.0
"""

import argparse
import json
import logging
import os
import sys
import uuid
from pathlib import Path
from typing import Optional, Sequence

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from config import ConfigurationManager
from docrecord.utils.exceptions import DocRecordError
from docrecord.utils.logger import APP_LOGGER_NAME, get_logger, setup_logger_from_config

CREDENTIAL_REF = "cli"


def parse_arguments(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        description="Document Record Extraction Engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", "-c", type=str, default=None, help="Path to custom configuration file")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    extract_parser = subparsers.add_parser("extract", help="Run pattern extraction over a text file")
    extract_parser.add_argument("--text", "-t", type=str, required=True, help="UTF-8 text file ('-' for stdin)")

    run_parser = subparsers.add_parser("run", help="Run a full extraction job over local page files")
    run_parser.add_argument("pages", nargs="+", help="Page files, in order")
    run_parser.add_argument("--owner", type=str, required=True, help="Owner id")
    run_parser.add_argument("--document-id", type=str, default=None, help="Document id (random if omitted)")
    run_parser.add_argument(
        "--mode", choices=["heuristic", "model-assisted"], default="heuristic", help="Extraction mode"
    )
    run_parser.add_argument("--provider", choices=["openai", "anthropic", "google"], default=None)
    run_parser.add_argument(
        "--api-key-env", type=str, default=None,
        help="Environment variable holding the provider API key"
    )
    run_parser.add_argument(
        "--text", "-t", type=str, default=None,
        help="Text file with OCR output for the pages; pages are read as text when omitted"
    )
    run_parser.add_argument("--db", type=str, default=None, help="Category database path")

    local_parser = subparsers.add_parser("local", help="Extract a file with an external extractor command")
    local_parser.add_argument("file", type=str, help="File to extract")
    local_parser.add_argument("--command", required=True, help="Extractor command line")
    local_parser.add_argument("--owner", type=str, default=None, help="Offer this owner's categories")
    local_parser.add_argument("--db", type=str, default=None, help="Category database path")

    return parser.parse_args(argv)


def initialize_system(args: argparse.Namespace) -> ConfigurationManager:
    """
    Initialize configuration and logging.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Initialized configuration manager.
    """
    config = ConfigurationManager(args.config)
    logger = setup_logger_from_config()
    if args.debug:
        logging.getLogger(APP_LOGGER_NAME).setLevel(logging.DEBUG)

    logger.debug(f"docrecord {config.get('project.version', '1.0.0')} - command: {args.command}")
    return config


def read_text(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8", errors="ignore")


class FileTextSource:
    """Serves OCR text from a file prepared outside the engine."""

    def __init__(self, path: str) -> None:
        self.text = read_text(path)

    def get_text(self, document_id, pages) -> Optional[str]:
        return self.text or None


def command_extract(args: argparse.Namespace) -> dict:
    from docrecord.heuristics import extract

    return extract(read_text(args.text)).to_dict()


def command_run(args: argparse.Namespace) -> dict:
    from docrecord.model_inference import build_http_client
    from docrecord.output_handler import CategoryStore
    from docrecord.pipeline import (
        ExtractionJob,
        ExtractionOrchestrator,
        StaticCredentialResolver,
        Utf8TextSource,
    )

    model_assisted = args.mode == "model-assisted"
    api_key = os.environ.get(args.api_key_env, "") if args.api_key_env else ""
    job = ExtractionJob(
        document_id=args.document_id or str(uuid.uuid4()),
        owner_id=args.owner,
        page_paths=list(args.pages),
        mode=args.mode,
        provider_id=args.provider if model_assisted else None,
        credential_ref=CREDENTIAL_REF if model_assisted else None,
    )

    text_source = FileTextSource(args.text) if args.text else Utf8TextSource()
    http_client = build_http_client() if model_assisted else None
    try:
        orchestrator = ExtractionOrchestrator(
            categories=CategoryStore(args.db),
            http_client=http_client,
            credential_resolver=StaticCredentialResolver({CREDENTIAL_REF: api_key}),
            text_source=text_source,
        )
        outcome = orchestrator.run(job)
    finally:
        if http_client is not None:
            http_client.close()

    return {'documentId': job.document_id, 'category': outcome.category.to_dict(), **outcome.record}


def command_local(args: argparse.Namespace) -> dict:
    from docrecord.model_inference.local_extractor import LocalExtractor
    from docrecord.output_handler import CategoryStore

    categories = []
    if args.owner:
        categories = [c.choice for c in CategoryStore(args.db).ensure_default_categories(args.owner)]
    return LocalExtractor(args.command).extract(args.file, categories).to_dict()


COMMANDS = {
    'extract': command_extract,
    'run': command_run,
    'local': command_local,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Main function - entry point for command-line execution.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    args = parse_arguments(argv)
    try:
        initialize_system(args)
        output = COMMANDS[args.command](args)
        print(json.dumps(output, indent=2, ensure_ascii=False))
        return 0

    except DocRecordError as e:
        get_logger(__name__).error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
