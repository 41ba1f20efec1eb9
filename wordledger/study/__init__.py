"""
Study Module.

Provides:
- Review recording on the mastery ladder (StudyLedger)
- Level unlocks and the free-tier daily quota (UnlockQuotaManager)
- The caller-facing facade and its composition root (WordLedgerService)
"""

from wordledger.study.ledger import ReviewRecorded, StudyLedger
from wordledger.study.quota import DAILY_REVIEW_GATE, UnlockQuotaManager, level_gate
from wordledger.study.service import WordLedgerService, build_service

__all__ = [
    "ReviewRecorded",
    "StudyLedger",
    "UnlockQuotaManager",
    "DAILY_REVIEW_GATE",
    "level_gate",
    "WordLedgerService",
    "build_service",
]
