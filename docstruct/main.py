"""
Document structure extractor - command line entry point.

Processes a PDF, a JSON token dump, or a directory of them and writes one
structure record per input document.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from .config import SummarizerConfig, load_environment, log_level_from_env
from .document_processor import DocumentProcessor, load_pages_from_json
from .json_handler import JSONHandler
from .logging_config import handle_document_error, setup_logging
from .summarizer import Summarizer

logger = setup_logging()

SUPPORTED_SUFFIXES = {'.pdf', '.json'}


def parse_arguments(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        argparse.Namespace: Parsed arguments
    """
    parser = argparse.ArgumentParser(
        description='Infer headings, sections, tables, entities and keywords from documents',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  docstruct --input report.pdf --output ./results
  docstruct -i ./pdfs -o ./results --summarize --workers 4
  docstruct -i tokens.json -o ./results
        """
    )

    parser.add_argument('--input', '-i', type=str, required=True,
                        help='PDF file, JSON token dump, or a directory containing them')
    parser.add_argument('--output', '-o', type=str, required=True,
                        help='Output directory for generated JSON files')
    parser.add_argument('--summarize', action='store_true',
                        help='Add an executive summary (remote when an API key is set, local otherwise)')
    parser.add_argument('--api-key', type=str, default=None,
                        help='API key for the remote summarizer (overrides the environment)')
    parser.add_argument('--text-only', action='store_true',
                        help='Decode PDFs as plain text, without positional metadata')
    parser.add_argument('--workers', type=int, default=1,
                        help='Worker threads for per-page processing')
    parser.add_argument('--log-level', type=str, default=None,
                        help='Logging level (DEBUG, INFO, WARNING, ERROR)')

    return parser.parse_args(argv)


def discover_inputs(input_path: Path) -> List[Path]:
    """
    Collect the documents to process.

    Args:
        input_path: A single file or a directory

    Returns:
        Sorted list of supported files
    """
    if input_path.is_file():
        return [input_path] if input_path.suffix.lower() in SUPPORTED_SUFFIXES else []

    files = [
        path for path in input_path.iterdir()
        if path.is_file() and path.suffix.lower() in SUPPORTED_SUFFIXES
    ]
    files.sort(key=lambda p: p.name.lower())

    logger.info(f"Discovered {len(files)} input documents")
    return files


def process_single_document(path: Path, output_dir: Path, processor: DocumentProcessor,
                            handler: JSONHandler, summarizer: Optional[Summarizer] = None,
                            text_only: bool = False) -> bool:
    """
    Process one document and write ``<stem>.json``.

    Args:
        path: PDF or JSON token dump
        output_dir: Output directory
        processor: Structure pipeline
        handler: JSON writer
        summarizer: Optional summarizer
        text_only: Decode PDFs without positional metadata

    Returns:
        True if processing succeeded, False otherwise
    """
    try:
        logger.info(f"Processing document: {path.name}")

        if path.suffix.lower() == '.json':
            with open(path, 'r', encoding='utf-8') as f:
                pages, metadata = load_pages_from_json(json.load(f))
            structure = processor.process(pages, metadata)
        else:
            structure = processor.process_pdf(path, text_only=text_only)

        summary = summarizer.summarize(structure) if summarizer is not None else None

        output_path = output_dir / (path.stem + '.json')
        return handler.process_and_write(structure, str(output_path), summary)

    except Exception as e:
        handle_document_error(str(path), e, logger)
        return False


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for document structure extraction."""
    load_environment()
    args = parse_arguments(argv)
    setup_logging(args.log_level or log_level_from_env())

    input_path = Path(args.input)
    if not input_path.exists():
        logger.error(f"Input path does not exist: {args.input}")
        return 1

    output_dir = Path(args.output)
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"Failed to create output directory {args.output}: {e}")
        return 1

    documents = discover_inputs(input_path)
    if not documents:
        logger.error(f"No PDF or JSON documents found at: {args.input}")
        return 1

    processor = DocumentProcessor(max_workers=args.workers)
    handler = JSONHandler()
    summarizer = Summarizer(SummarizerConfig.from_env(api_key=args.api_key)) if args.summarize else None

    successful_count = 0
    failed_files = []
    total = len(documents)
    for i, path in enumerate(documents, 1):
        logger.info(f"Processing file {i}/{total}: {path.name}")
        if process_single_document(path, output_dir, processor, handler, summarizer, args.text_only):
            successful_count += 1
        else:
            failed_files.append(path.name)

    logger.info("=" * 60)
    logger.info("PROCESSING SUMMARY:")
    logger.info(f"Total files: {total}")
    logger.info(f"Successful: {successful_count}")
    logger.info(f"Failed: {len(failed_files)}")

    if failed_files:
        logger.warning(f"Failed files: {', '.join(failed_files)}")

    if successful_count == 0:
        logger.error("All documents failed to process")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
