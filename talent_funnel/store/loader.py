"""Load candidate pools from YAML or JSON files."""

import json
import logging
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from talent_funnel.core.schemas import Candidate

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def _snake_case(key: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def normalize_record(record: dict[str, Any]) -> dict[str, Any]:
    """Convert camelCase keys (``jobTitle``, ``lastActive``) to field names."""
    normalized = {_snake_case(str(key)): value for key, value in record.items()}
    if isinstance(normalized.get("id"), int):
        normalized["id"] = str(normalized["id"])
    return normalized


def _read_records(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        return json.loads(text)
    return yaml.safe_load(text)


def load_candidates_file(path: str | Path) -> list[Candidate]:
    """Read a list of candidate records from ``path``.

    Accepts a top-level list or a mapping with a ``candidates`` key. Records
    that fail validation are dropped with a warning.

    Raises:
        FileNotFoundError: if ``path`` does not exist.
        ValueError: if the file does not hold a list of records.
    """
    path = Path(path)
    if not path.exists():
        msg = f"Candidates file not found: {path}"
        raise FileNotFoundError(msg)

    try:
        data = _read_records(path)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        msg = f"Could not parse candidates file {path}: {e}"
        raise ValueError(msg) from e

    if isinstance(data, dict):
        data = data.get("candidates")
    if not isinstance(data, list):
        msg = f"Candidates file {path} must contain a list of records"
        raise ValueError(msg)

    candidates: list[Candidate] = []
    for index, record in enumerate(data):
        if not isinstance(record, dict):
            logger.warning("Skipping record %d: not a mapping", index)
            continue
        try:
            candidates.append(Candidate.model_validate(normalize_record(record)))
        except ValidationError as e:
            logger.warning("Skipping record %d: %s", index, e.errors()[0].get("msg", e))

    logger.info("Loaded %d candidates from %s", len(candidates), path)
    return candidates
