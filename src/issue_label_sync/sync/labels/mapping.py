"""Project-name to label-name mapping document.

The document is a JSON object keyed by project name:

    {
      "Billing Platform": {
        "001 Core Systems": "[100-199]",
        "002 Core Areas": "[50]"
      }
    }

The keys of each entry match the label groups in the tracker.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, RootModel, ValidationError

logger = logging.getLogger(__name__)

SYSTEM_GROUP_KEY = "001 Core Systems"
AREA_GROUP_KEY = "002 Core Areas"


class MappingLoadError(RuntimeError):
    """The mapping document is missing or malformed."""


class ProjectLabels(BaseModel):
    """Canonical label names for one project."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    system_label: str = Field(alias=SYSTEM_GROUP_KEY, min_length=1)
    area_label: str = Field(alias=AREA_GROUP_KEY, min_length=1)


class ProjectLabelMapping(RootModel[dict[str, ProjectLabels]]):
    model_config = ConfigDict(frozen=True)

    def get(self, project_name: str) -> ProjectLabels | None:
        return self.root.get(project_name)

    def __len__(self) -> int:
        return len(self.root)


def load_label_mapping(path: Path) -> ProjectLabelMapping:
    """Read and validate the mapping document at `path`.

    Raises:
        MappingLoadError: If the file is absent, not JSON, or has the wrong shape.
    """

    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise MappingLoadError(f"Label mapping file not found: {path}") from e
    except OSError as e:
        raise MappingLoadError(f"Label mapping file could not be read: {path}: {e}") from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MappingLoadError(f"Label mapping file is not valid JSON: {path}: {e}") from e

    try:
        mapping = ProjectLabelMapping.model_validate(data)
    except ValidationError as e:
        raise MappingLoadError(f"Label mapping file has an unexpected shape: {path}\n{e}") from e

    logger.info("Label mapping loaded", extra={"path": str(path), "projects": len(mapping)})
    return mapping
