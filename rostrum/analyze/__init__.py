"""
rostrum.analyze - Text sentiment analysis.

Segments text into sentences, classifies them in one batched call, and
aggregates the signed scores into a document-level result.
"""

from __future__ import annotations
