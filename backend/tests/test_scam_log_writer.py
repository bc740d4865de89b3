"""
Unit tests for ScamLogWriter.
"""

from unittest.mock import MagicMock, Mock

import pytest

from app.errors import PersistenceError
from app.models.analysis import AnalysisRequest, AnalysisResult
from app.services.scam_log_writer import ScamLogWriter


def _request(**overrides) -> AnalysisRequest:
    data = {
        "messageType": "email",
        "sender": "a@b.com",
        "subject": "Urgent!",
        "content": "Click here",
    }
    data.update(overrides)
    return AnalysisRequest.model_validate(data)


RESULT = AnalysisResult(
    risk_level="phishing",
    risk_score=0.9,
    flagged_reasons=["Spoofed sender"],
    analysis="Looks like a bank impersonation.",
    recommendations=["Do not click", "Report it"],
)


def _stored_row(row: dict) -> dict:
    return {"id": "log-1", "created_at": "2026-10-17T10:00:00+00:00", **row}


class TestBuildRow:

    def test_maps_request_and_result(self):
        row = ScamLogWriter(MagicMock()).build_row("user-1", _request(), RESULT)

        assert row == {
            "user_id": "user-1",
            "message_type": "email",
            "sender": "a@b.com",
            "subject": "Urgent!",
            "content": "Click here",
            "risk_level": "phishing",
            "risk_score": 0.9,
            "flagged_reasons": ["Spoofed sender"],
            "ai_analysis": {
                "risk_level": "phishing",
                "risk_score": 0.9,
                "flagged_reasons": ["Spoofed sender"],
                "analysis": "Looks like a bank impersonation.",
                "recommendations": ["Do not click", "Report it"],
            },
        }

    def test_audio_only_call_stores_empty_content_and_null_subject(self):
        request = _request(messageType="call", sender="+14155550123", subject=None,
                           content=None, audioData="UklGRg==")
        row = ScamLogWriter(MagicMock()).build_row("user-1", request, RESULT)

        assert row["content"] == ""
        assert row["subject"] is None
        assert "audioData" not in row and "audio_data" not in row


class TestWrite:

    def test_inserts_one_row_and_returns_stored_row(self):
        client = MagicMock()
        writer = ScamLogWriter(client)
        row = writer.build_row("user-1", _request(), RESULT)
        client.table.return_value.insert.return_value.execute.return_value = Mock(data=[_stored_row(row)])

        stored = writer.write("user-1", _request(), RESULT)

        client.table.assert_called_once_with("scam_logs")
        client.table.return_value.insert.assert_called_once_with(row)
        assert stored["id"] == "log-1"
        assert stored["risk_level"] == "phishing"
        assert stored["user_id"] == "user-1"

    def test_insert_exception_raises_persistence_error(self):
        client = MagicMock()
        client.table.return_value.insert.return_value.execute.side_effect = Exception(
            "new row violates row-level security policy"
        )

        with pytest.raises(PersistenceError) as exc_info:
            ScamLogWriter(client).write("user-1", _request(), RESULT)

        assert exc_info.value.status_code == 500
        assert exc_info.value.detail == "Failed to save analysis"
        assert "row-level security" in exc_info.value.details

    def test_empty_insert_result_raises_persistence_error(self):
        client = MagicMock()
        client.table.return_value.insert.return_value.execute.return_value = Mock(data=[])

        with pytest.raises(PersistenceError):
            ScamLogWriter(client).write("user-1", _request(), RESULT)

    def test_unexpected_stored_row_shape_is_not_an_error(self):
        """A committed row is returned as-is, even if read models would reject it."""
        client = MagicMock()
        client.table.return_value.insert.return_value.execute.return_value = Mock(
            data=[{"id": 42, "risk_level": "phishing", "created_at": None}]
        )

        stored = ScamLogWriter(client).write("user-1", _request(), RESULT)

        assert stored["id"] == 42
