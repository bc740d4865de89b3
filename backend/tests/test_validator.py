"""
Unit tests for submission validation and sanitization.
"""

import os

import pytest

os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon.key-payload.signature")

from app.models.analysis import CONTENT_REQUIRED_MESSAGE, MessageType
from app.services.validator import sanitize_text, validate_analysis_request


def _fields(result):
    return {e.field for e in result.errors}


class TestValidRequests:

    def test_valid_email_request(self):
        result = validate_analysis_request({
            "messageType": "email",
            "sender": "a@b.com",
            "subject": "Urgent!",
            "content": "Click here to verify your account now",
        })

        assert result.ok
        assert result.errors == []
        assert result.request.message_type == MessageType.EMAIL
        assert result.request.sender == "a@b.com"
        assert result.request.subject == "Urgent!"

    def test_valid_sms_with_phone_sender(self):
        result = validate_analysis_request({
            "messageType": "sms",
            "sender": "+14155550123",
            "content": "You won a prize",
        })
        assert result.ok

    def test_call_with_audio_only_is_valid(self):
        result = validate_analysis_request({
            "messageType": "call",
            "sender": "+14155550123",
            "audioData": "UklGRiQAAABXQVZF",
        })
        assert result.ok
        assert result.request.has_audio

    def test_call_with_transcript_only_is_valid(self):
        result = validate_analysis_request({
            "messageType": "call",
            "sender": "14155550123",
            "content": "This is the IRS, pay now",
        })
        assert result.ok
        assert not result.request.has_audio

    def test_fields_are_trimmed(self):
        result = validate_analysis_request({
            "messageType": "email",
            "sender": "  a@b.com  ",
            "subject": "  Hello ",
            "content": "\n body \n",
        })
        assert result.request.sender == "a@b.com"
        assert result.request.subject == "Hello"
        assert result.request.content == "body"


class TestInvalidRequests:

    def test_unknown_message_type(self):
        result = validate_analysis_request({
            "messageType": "fax",
            "sender": "a@b.com",
            "content": "hello",
        })
        assert not result.ok
        assert "messageType" in _fields(result)

    def test_sender_must_be_email_or_phone(self):
        result = validate_analysis_request({
            "messageType": "email",
            "sender": "not a sender",
            "content": "hello",
        })
        assert not result.ok
        assert "sender" in _fields(result)
        assert any("valid email or phone" in e.message for e in result.errors)

    def test_phone_cannot_start_with_zero(self):
        result = validate_analysis_request({
            "messageType": "sms",
            "sender": "+04155550123",
            "content": "hello",
        })
        assert "sender" in _fields(result)

    def test_phone_longer_than_fifteen_digits_rejected(self):
        result = validate_analysis_request({
            "messageType": "sms",
            "sender": "+1234567890123456",
            "content": "hello",
        })
        assert "sender" in _fields(result)

    def test_sender_too_long(self):
        result = validate_analysis_request({
            "messageType": "email",
            "sender": "a" * 250 + "@b.com",
            "content": "hello",
        })
        assert "sender" in _fields(result)

    def test_subject_too_long(self):
        result = validate_analysis_request({
            "messageType": "email",
            "sender": "a@b.com",
            "subject": "x" * 501,
            "content": "hello",
        })
        assert "subject" in _fields(result)

    def test_content_too_long(self):
        result = validate_analysis_request({
            "messageType": "email",
            "sender": "a@b.com",
            "content": "x" * 10001,
        })
        assert "content" in _fields(result)

    def test_email_requires_content(self):
        result = validate_analysis_request({
            "messageType": "email",
            "sender": "a@b.com",
        })
        assert not result.ok
        assert any(e.message == CONTENT_REQUIRED_MESSAGE for e in result.errors)

    def test_whitespace_only_content_counts_as_missing(self):
        result = validate_analysis_request({
            "messageType": "sms",
            "sender": "+14155550123",
            "content": "   ",
        })
        assert not result.ok

    def test_call_without_content_or_audio_rejected(self):
        result = validate_analysis_request({
            "messageType": "call",
            "sender": "+14155550123",
            "content": "",
            "audioData": "",
        })
        assert not result.ok
        assert any(e.message == CONTENT_REQUIRED_MESSAGE for e in result.errors)

    def test_reports_every_violated_field(self):
        """Field errors and the content rule are all reported together."""
        result = validate_analysis_request({
            "messageType": "email",
            "sender": "nope",
            "subject": "x" * 600,
        })
        fields = _fields(result)
        assert "sender" in fields
        assert "subject" in fields
        assert any(e.message == CONTENT_REQUIRED_MESSAGE for e in result.errors)

    def test_non_object_body_rejected(self):
        result = validate_analysis_request(["not", "an", "object"])
        assert not result.ok
        assert _fields(result) == {"body"}

    def test_none_body_rejected(self):
        assert not validate_analysis_request(None).ok


class TestSanitization:

    @pytest.mark.parametrize("raw, expected", [
        ("<script>alert(1)</script>", "scriptalert(1)/script"),
        ("JavaScript:alert(1)", "alert(1)"),
        ('<img src=x onerror=alert(1)>', "img src=x alert(1)"),
        ("ONCLICK=steal()", "steal()"),
        ("plain text", "plain text"),
        ("", ""),
    ])
    def test_strips_markup(self, raw, expected):
        assert sanitize_text(raw) == expected

    def test_nested_fragments_are_removed(self):
        assert sanitize_text("jajavascript:vascript:go") == "go"
        assert "<" not in sanitize_text("<<>script>")

    @pytest.mark.parametrize("raw", [
        "<b>hi</b> javascript:void(0) onload=x",
        "jajavascript:vascript:",
        "oonclick=nclick=",
        "nothing to see",
    ])
    def test_idempotent(self, raw):
        once = sanitize_text(raw)
        assert sanitize_text(once) == once

    def test_sanitization_applied_after_validation(self):
        result = validate_analysis_request({
            "messageType": "email",
            "sender": "a@b.com",
            "subject": "<b>Win</b>",
            "content": 'Click <a href="javascript:steal()" onclick=go()>here</a>',
        })

        assert result.ok
        assert result.request.subject == "bWin/b"
        content = result.request.content
        assert "<" not in content and ">" not in content
        assert "javascript:" not in content.lower()
        assert "onclick=" not in content.lower()
