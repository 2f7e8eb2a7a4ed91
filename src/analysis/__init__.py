"""Peer graph traversal and issue classification."""

from .walker import GraphWalker
from .classifier import IssueClassifier, classify, dedupe

__all__ = [
    "GraphWalker",
    "IssueClassifier",
    "classify",
    "dedupe",
]
