"""
External Local Extractor Protocol.

Runs a user-supplied extractor command as a child process. The child
receives one JSON line on stdin:

    {"filePath", "fileName", "mimeType", "fileSizeBytes",
     "categories": [{"name", "slug"}]}

and must print exactly one JSON object on stdout within the time budget:

    {"summary", "fields", "entities", "categorySlug", "categoryName",
     "assetName", "rawText"}   (every key optional)

A non-zero exit, empty stdout or invalid JSON is a ProviderError that
carries the child's stderr; exceeding the budget is a TimeoutError.
"""

import json
import shlex
import subprocess
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from config import get_config
from docrecord.classification.category import CategoryChoice
from docrecord.classification.classifier import classify
from docrecord.input_handler.loader import guess_media_type
from docrecord.reconciliation.naming import derive_asset_name
from docrecord.utils.exceptions import NotFoundError, ProviderError, TimeoutError, ValidationError
from docrecord.utils.helpers import humanize_slug, sanitize_asset_name, slugify
from docrecord.utils.logger import get_logger
from .extraction_result import ExtractionResult
from .normalizer import coerce_entities, coerce_fields

logger = get_logger(__name__)

PROVIDER_NAME = "local-extractor"
CATEGORY_NAME_CHARS = 100


def build_request(file_path: Union[str, Path], categories: Sequence[CategoryChoice],
                  mime_type: Optional[str] = None) -> Dict[str, Any]:
    """
    Build the stdin payload for one file.

    Raises:
        NotFoundError: If the file does not exist.
    """
    path = Path(file_path)
    if not path.is_file():
        raise NotFoundError("file", str(file_path))
    return {
        'filePath': str(path),
        'fileName': path.name,
        'mimeType': mime_type or guess_media_type(path.name),
        'fileSizeBytes': path.stat().st_size,
        'categories': [{'name': c.name, 'slug': c.slug} for c in categories],
    }


def _non_blank(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def normalize_local_output(output: Any, request: Dict[str, Any]) -> ExtractionResult:
    """
    Normalize the child's JSON object into an ExtractionResult.

    Missing pieces are filled in: the summary from the file name and
    size, the category by classifying the file name plus any text, and
    the asset name by title derivation.

    Raises:
        ProviderError: If the output is not a JSON object.
    """
    if not isinstance(output, dict):
        raise ProviderError("Local extractor output must be a JSON object", PROVIDER_NAME)

    file_name = request['fileName']
    choices = [CategoryChoice(c['name'], c['slug']) for c in request.get('categories', [])]
    summary = _non_blank(output.get('summary'))
    raw_text = output.get('rawText') if _non_blank(output.get('rawText')) else None

    fallback_slug = classify(f"{file_name}\n{summary or ''}\n{raw_text or ''}", choices)
    fallback_name = next((c.name for c in choices if c.slug == fallback_slug), humanize_slug(fallback_slug))

    category_slug = slugify(_non_blank(output.get('categorySlug'))) or fallback_slug
    category_name = _non_blank(output.get('categoryName'))
    category_name = category_name[:CATEGORY_NAME_CHARS] if category_name else fallback_name

    fields = coerce_fields(output.get('fields'))
    asset_name = _non_blank(output.get('assetName'))
    if asset_name:
        asset_name = sanitize_asset_name(asset_name, get_config("limits.asset_name_chars", 180))
    else:
        asset_name = derive_asset_name(fields, category_name, file_name)

    return ExtractionResult(
        summary=summary or f"Uploaded {file_name} ({request['fileSizeBytes']} bytes).",
        fields=fields,
        entities=coerce_entities(output.get('entities')),
        suggested_category_slug=category_slug,
        suggested_category_name=category_name,
        raw_text=raw_text,
        asset_name=asset_name or file_name,
    )


class LocalExtractor:
    """
    Runs an external extractor command over local files.

    Attributes:
        command: Command line, split with shell rules; never run through a shell
        timeout: Time budget per file in seconds

    Example:
        >>> extractor = LocalExtractor("python my_extractor.py")
        >>> result = extractor.extract("scans/receipt.jpg", categories)
    """

    def __init__(self, command: Union[str, List[str]], timeout: Optional[float] = None) -> None:
        self.command = shlex.split(command) if isinstance(command, str) else list(command)
        if not self.command:
            raise ValidationError("Local extractor command is empty")
        self.timeout = timeout if timeout is not None else get_config("local_extractor.timeout_seconds", 120)

    def run(self, request: Dict[str, Any]) -> Any:
        """
        Send one request to the child process and return its parsed JSON.

        Raises:
            TimeoutError: The child exceeded the time budget.
            ProviderError: The child could not start, exited non-zero,
                or printed empty or invalid JSON.
        """
        logger.debug(f"Running local extractor: {self.command[0]}")
        try:
            completed = subprocess.run(
                self.command,
                input=json.dumps(request) + "\n",
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            logger.error(f"Local extractor timed out after {self.timeout}s")
            raise TimeoutError(PROVIDER_NAME, self.timeout) from e
        except OSError as e:
            raise ProviderError(f"Local extractor could not start: {e}", PROVIDER_NAME) from e

        stderr = (completed.stderr or "").strip()
        if completed.returncode != 0:
            message = (
                f"Local extractor failed: {stderr}" if stderr
                else f"Local extractor exited with code {completed.returncode}"
            )
            logger.error(message)
            raise ProviderError(message, PROVIDER_NAME, {"exit_code": completed.returncode})

        stdout = (completed.stdout or "").strip()
        if not stdout:
            raise ProviderError("Local extractor returned empty output", PROVIDER_NAME, {"stderr": stderr})

        try:
            return json.loads(stdout)
        except json.JSONDecodeError as e:
            raise ProviderError(
                "Local extractor output must be valid JSON", PROVIDER_NAME, {"stderr": stderr}
            ) from e

    def extract(self, file_path: Union[str, Path], categories: Sequence[CategoryChoice],
                mime_type: Optional[str] = None) -> ExtractionResult:
        """
        Extract one file through the external command.

        Args:
            file_path: Local file to extract.
            categories: The owner's categories, offered to the extractor.
            mime_type: Media type override; guessed from the name otherwise.

        Returns:
            Normalized ExtractionResult.
        """
        request = build_request(file_path, categories, mime_type)
        result = normalize_local_output(self.run(request), request)
        logger.info(f"Local extractor processed {request['fileName']}: {result!r}")
        return result
