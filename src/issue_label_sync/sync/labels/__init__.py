"""Label inference: static rules, mapping document and resolver strategies."""

from issue_label_sync.sync.labels.mapping import MappingLoadError, load_label_mapping
from issue_label_sync.sync.labels.resolvers import (
    LabelRequirementResolver,
    MappingResolver,
    ProjectNotMappedError,
    ResolverFactory,
    StaticRangeResolver,
)
from issue_label_sync.sync.labels.rules import (
    InvalidIdentifierError,
    LabelInferenceError,
    LabelRequirement,
    infer_area_label,
    infer_system_label,
)

__all__ = [
    "InvalidIdentifierError",
    "LabelInferenceError",
    "LabelRequirement",
    "LabelRequirementResolver",
    "MappingLoadError",
    "MappingResolver",
    "ProjectNotMappedError",
    "ResolverFactory",
    "StaticRangeResolver",
    "infer_area_label",
    "infer_system_label",
    "load_label_mapping",
]
