"""
Rostrum - sentiment trend tracking for speeches.

Takes speech text or recorded/uploaded audio and runs it through an
asynchronous pipeline: audio preparation → transcription → sentence
segmentation → batched sentiment classification → score aggregation →
a date-ordered session rendered as a list and a trend chart.
"""

__version__ = "0.1.0"
