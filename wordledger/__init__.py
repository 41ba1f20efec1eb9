"""
wordledger - vocabulary progress core.

Tracks review outcomes on a bounded mastery ladder, keeps the study streak,
guards time-gated features with a tamper-resistant clock and builds
multiple-choice quiz options.
"""

__version__ = "1.0.0"
