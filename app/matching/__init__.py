"""
Similarity scoring for catalog-to-store matching.
"""

from app.matching.similarity import clean_name, compute_confidence, developer_similarity, name_similarity

__all__ = [
    "clean_name",
    "compute_confidence",
    "developer_similarity",
    "name_similarity",
]
