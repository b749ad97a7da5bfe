"""
Webhook intake: payload contracts, field normalization and submission mapping.
"""

from .contracts import IngestResult, InsuranceOutcome, StoredSubmission, SubmissionBundle, TallyWebhookPayload
from .field_normalizer import AnswerMap, normalize_field, parse_answers

__all__ = [
    "IngestResult", "InsuranceOutcome", "StoredSubmission", "SubmissionBundle", "TallyWebhookPayload",
    "AnswerMap", "normalize_field", "parse_answers",
]
