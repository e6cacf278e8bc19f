"""Page and section targeting."""

from .resolver import AmbiguousTarget, ResolvedTarget, TargetNotFound, TargetResolver, resolve, score_title
from .sections import PageStructure, Section, build_sections, classify_page_structure, locate

__all__ = [
    "AmbiguousTarget",
    "PageStructure",
    "ResolvedTarget",
    "Section",
    "TargetNotFound",
    "TargetResolver",
    "build_sections",
    "classify_page_structure",
    "locate",
    "resolve",
    "score_title",
]
