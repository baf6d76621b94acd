"""Template files for ``ccat init``.

The config template is generated from the pydantic model defaults so the
documented values never drift from the real ones.
"""

from __future__ import annotations

from typing import Any

import yaml
from pydantic import BaseModel

from canonicalcat.config.models import CacheConfig, IndexerConfig, OutputConfig, ScanConfig

_SECTIONS: tuple[tuple[str, type[BaseModel]], ...] = (
    ("scan", ScanConfig),
    ("cache", CacheConfig),
    ("indexer", IndexerConfig),
    ("output", OutputConfig),
)

_HEADER = """\
# canonical-cat configuration
#
# Precedence: CLI > env (CANONICALCAT__SECTION__KEY) > this file
#             > ~/.config/canonicalcat/config.yaml > defaults
"""


def _section_yaml(name: str, model: type[BaseModel]) -> str:
    defaults: dict[str, Any] = model().model_dump()
    lines = [f"{name}:"]
    for field_name, info in model.model_fields.items():
        if info.description:
            for desc_line in info.description.splitlines():
                lines.append(f"  # {desc_line}")
        dumped = yaml.safe_dump({field_name: defaults[field_name]}, default_flow_style=False)
        lines.extend(f"  {line}" for line in dumped.rstrip().splitlines())
    return "\n".join(lines)


def get_config_template() -> str:
    """Documented config.yaml with every user-facing default spelled out."""
    body = "\n\n".join(_section_yaml(name, model) for name, model in _SECTIONS)
    return f"{_HEADER}\n{body}\n\nlogging:\n  level: INFO\n"


def get_gitignore_template() -> str:
    return "# Generated by ccat; only config.yaml is meant to be committed\n*\n!.gitignore\n!config.yaml\n"


__all__ = ["get_config_template", "get_gitignore_template"]
