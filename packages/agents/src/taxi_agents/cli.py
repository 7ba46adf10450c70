"""Prepare a return from local tax documents.

Usage:
    taxi-prepare w2.pdf 1099-int.png
    taxi-prepare w2.pdf 1099-int.png --answers answers.json

Documents are given in order of authority: when two documents disagree,
the earlier one wins. The answers file is a JSON object keyed by field
name (e.g. {"filingStatus": "single", "dividends": 850}).

Exit codes: 0 when the return was computed, 2 when fields are still
missing, 1 on configuration or input errors.
"""

import argparse
import asyncio
import json
import os
import sys
from pathlib import Path
from typing import Any, Optional, Sequence

from dotenv import load_dotenv

from taxi_core.exceptions import ConfigurationError, ValidationError

from .config import TaxiConfig
from .extraction_agent import DocumentExtractor
from .generation import AnthropicGenerationClient
from .interfaces.base import DocumentRef, GenerationClient
from .interfaces.types import PreparedReturn
from .logging_setup import configure_logging
from .pipeline import ReturnPipeline
from .storage import InMemoryDocumentRegistry, LocalObjectStore

LOCAL_OWNER = "local"

EXIT_COMPLETE = 0
EXIT_ERROR = 1
EXIT_INCOMPLETE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="taxi-prepare",
        description="Extract, reconcile and compute a tax return from local documents.",
    )
    parser.add_argument("documents", nargs="+", type=Path, help="Document files, most authoritative first")
    parser.add_argument("--answers", type=Path, help="JSON file with answers for missing fields")
    parser.add_argument("--log-level", help="Override TAXI_LOG_LEVEL")
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines on stderr (always on in production)")
    return parser


def load_answers(path: Optional[Path]) -> dict[str, Any]:
    """Read the answers file; it must hold a JSON object."""
    if path is None:
        return {}
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValidationError("Answers file must contain a JSON object", constraint="object")
    return data


def render_result(prepared: PreparedReturn) -> dict[str, Any]:
    """Summarise a prepared return as plain JSON-safe data."""
    return {
        "status": "complete" if prepared.is_complete else "incomplete",
        "return": prepared.renderable.to_dict() if prepared.renderable else None,
        "missingFields": list(prepared.missing_fields),
        "documentErrors": [error.model_dump(mode="json") for error in prepared.document_errors],
    }


def main(argv: Optional[Sequence[str]] = None, client: Optional[GenerationClient] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    config = TaxiConfig()
    level = args.log_level or ("DEBUG" if config.is_debug else config.log_level)
    configure_logging(level, json_output=args.json_logs or config.is_production)

    paths = [path.resolve() for path in args.documents]
    root = Path(os.path.commonpath([path.parent for path in paths]))
    registry = InMemoryDocumentRegistry()
    document_ids = []
    for index, path in enumerate(paths, start=1):
        document_id = f"doc-{index}"
        registry.register(
            DocumentRef(
                document_id=document_id,
                owner_id=LOCAL_OWNER,
                location=str(path.relative_to(root)),
                filename=path.name,
            )
        )
        document_ids.append(document_id)

    try:
        answers = load_answers(args.answers)
        extractor = DocumentExtractor(client or AnthropicGenerationClient(config.llm, config.pipeline))
        pipeline = ReturnPipeline(extractor, LocalObjectStore(root), registry, config)
        prepared = asyncio.run(pipeline.prepare(LOCAL_OWNER, document_ids, answers))
    except (ConfigurationError, ValidationError) as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_ERROR
    except (OSError, json.JSONDecodeError) as e:
        print(f"error: could not read answers: {e}", file=sys.stderr)
        return EXIT_ERROR

    print(json.dumps(render_result(prepared), indent=2))
    return EXIT_COMPLETE if prepared.is_complete else EXIT_INCOMPLETE


if __name__ == "__main__":
    sys.exit(main())
