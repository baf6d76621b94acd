"""JSON catalog output."""

from __future__ import annotations

import json
import os
import tempfile
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import structlog

from canonicalcat.index.models import EntityMetadata

log = structlog.get_logger(__name__)


def catalog_document(entities: Sequence[EntityMetadata]) -> dict[str, Any]:
    ordered = sorted(entities, key=lambda m: (m.entity.rel_path, m.entity.name))
    return {
        "generatedAt": datetime.now(UTC).isoformat(),
        "entities": [m.to_dict() for m in ordered],
    }


def write_json_catalog(entities: Sequence[EntityMetadata], path: Path) -> Path:
    """Write the catalog atomically.

    Raises:
        OSError: If the directory or file cannot be written.
    """
    payload = json.dumps(catalog_document(entities), indent=2)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(payload)
            f.write("\n")
        os.replace(tmp_name, path)
    except OSError:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    log.info("catalog_written", path=str(path), entities=len(entities))
    return path
