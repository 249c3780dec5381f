"""
Extractor module for finding, classifying and scoring brand mentions.

This module turns a free-text provider answer into structured visibility
signals: which known brands are mentioned, which belong to the organization,
how prominent the organization is, and a bounded visibility score.

Public API:
    - normalize: Canonical form used for every comparison
    - build_gazetteer / GazetteerCache: Catalog variant lookup
    - DeterministicExtractor / AssistedExtractor: Extraction strategies
    - classify / CompetitorMention: Org vs competitor split
    - score / prominence_rank: Visibility scoring
    - analyze_response / AnalysisResult: Full pipeline
"""

from brand_visibility.extractor.assisted_extractor import AssistedExtractor
from brand_visibility.extractor.classifier import CompetitorMention, classify
from brand_visibility.extractor.gazetteer import (
    CatalogCollision,
    Gazetteer,
    GazetteerCache,
    build_gazetteer,
    find_near_duplicates,
)
from brand_visibility.extractor.mention_detector import (
    DeterministicExtractor,
    ExtractionOutcome,
    Mention,
    MentionExtractor,
)
from brand_visibility.extractor.normalizer import normalize, normalize_with_offsets
from brand_visibility.extractor.parser import (
    AnalysisMetadata,
    AnalysisResult,
    analyze_response,
    assemble_result,
)
from brand_visibility.extractor.scoring import prominence_rank, score

__all__ = [
    "AnalysisMetadata",
    "AnalysisResult",
    "AssistedExtractor",
    "CatalogCollision",
    "CompetitorMention",
    "DeterministicExtractor",
    "ExtractionOutcome",
    "Gazetteer",
    "GazetteerCache",
    "Mention",
    "MentionExtractor",
    "analyze_response",
    "assemble_result",
    "build_gazetteer",
    "classify",
    "find_near_duplicates",
    "normalize",
    "normalize_with_offsets",
    "prominence_rank",
    "score",
]
