"""Pluggable strategies that turn a project into a label requirement."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from issue_label_sync.sync.config import SyncSettings
from issue_label_sync.sync.labels.mapping import ProjectLabelMapping, load_label_mapping
from issue_label_sync.sync.labels.rules import (
    LabelInferenceError,
    LabelRequirement,
    infer_requirement,
)
from issue_label_sync.sync.tracker.models import Project

logger = logging.getLogger(__name__)


class ProjectNotMappedError(LabelInferenceError):
    """The project name has no entry in the mapping document."""


class LabelRequirementResolver(ABC):
    """Resolve the canonical labels required for issues of a project.

    Implementations must be pure: the same project always yields the same
    requirement or the same error.
    """

    uses_mapping: bool = False

    @abstractmethod
    def resolve(self, project: Project) -> LabelRequirement:
        """Return the requirement for `project`.

        Raises:
            LabelInferenceError: If the project cannot be resolved. Callers
                skip the issue rather than abort.
        """

    @abstractmethod
    def describe(self) -> str:
        """Short description for log lines."""


class StaticRangeResolver(LabelRequirementResolver):
    """Derive labels from the numeric project identifier.

    The project name is never consulted; a project without an identifier
    cannot be resolved.
    """

    def resolve(self, project: Project) -> LabelRequirement:
        return infer_requirement(project.identifier or "")

    def describe(self) -> str:
        return "static numeric ranges"


class MappingResolver(LabelRequirementResolver):
    """Look labels up by project name in a mapping document."""

    uses_mapping = True

    def __init__(self, mapping: ProjectLabelMapping) -> None:
        self._mapping = mapping

    @property
    def mapped_projects(self) -> int:
        return len(self._mapping)

    def resolve(self, project: Project) -> LabelRequirement:
        entry = self._mapping.get(project.name)
        if entry is None:
            raise ProjectNotMappedError(f"Project is not in the label mapping: {project.name!r}")
        return LabelRequirement(system_label=entry.system_label, area_label=entry.area_label)

    def describe(self) -> str:
        return f"label mapping ({self.mapped_projects} projects)"


class ResolverFactory:
    """Factory for creating the configured resolver."""

    @staticmethod
    def create(settings: SyncSettings) -> LabelRequirementResolver:
        """Create a resolver based on `settings.label_mode`.

        The mapping document is read here, before any network call, so a
        missing or malformed document stops the run up front.

        Raises:
            MappingLoadError: In "mapping" mode when the document is unusable.
            ValueError: If the mode is not supported.
        """
        logger.info("Creating label resolver", extra={"mode": settings.label_mode})

        if settings.label_mode == "static":
            return StaticRangeResolver()
        if settings.label_mode == "mapping":
            return MappingResolver(load_label_mapping(settings.label_mapping_path))
        raise ValueError(f"Unsupported label mode: {settings.label_mode}")
