"""
Message analysis pipeline.

validate -> build prompt -> classify -> trusted-contact override -> persist

Validation failures stop the pipeline before any network call. Upstream
and persistence failures propagate as their own error types; nothing is
retried, and a verdict that could not be stored is not returned.
"""

import logging
from typing import Any

from postgrest import SyncPostgrestClient

from app.errors import ValidationError
from app.models.analysis import AnalysisResult
from app.services.classifier import Classifier
from app.services.prompt_builder import build_prompt
from app.services.scam_log_writer import ScamLogWriter
from app.services.trust import apply_trust_override, fetch_trusted_contacts
from app.services.validator import validate_analysis_request

logger = logging.getLogger(__name__)


class AnalysisPipeline:

    def __init__(self, classifier: Classifier, db: SyncPostgrestClient):
        self.classifier = classifier
        self.db = db
        self.writer = ScamLogWriter(db)

    def run(self, raw: Any, user_id: str) -> AnalysisResult:
        """
        Analyse one submission for ``user_id`` and return the stored verdict.

        Raises:
            ValidationError: the submission is invalid.
            UpstreamRateLimited, UpstreamQuotaExhausted,
            UpstreamClassificationFailure: the classifier failed.
            PersistenceError: the verdict could not be stored.
        """
        validation = validate_analysis_request(raw)
        if not validation.ok:
            raise ValidationError(validation.errors)
        request = validation.request

        prompt = build_prompt(request)
        result = self.classifier.classify(prompt)

        trusted = fetch_trusted_contacts(self.db, user_id)
        result = apply_trust_override(result, request.sender, trusted)

        self.writer.write(user_id, request, result)
        logger.info(
            "Analysed %s for user %s: %s (%.2f)",
            request.message_type.value,
            user_id,
            result.risk_level.value,
            result.risk_score,
        )
        return result
