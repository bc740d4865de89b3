"""
Unit tests for classification prompt construction.
"""

from app.models.analysis import AnalysisRequest, MessageType
from app.services.prompt_builder import SYSTEM_PROMPT, build_prompt


def _request(**overrides) -> AnalysisRequest:
    data = {
        "messageType": "email",
        "sender": "a@b.com",
        "subject": "Urgent!",
        "content": "Click here to verify your account now",
    }
    data.update(overrides)
    return AnalysisRequest.model_validate(data)


class TestTextTemplate:

    def test_email_prompt_includes_sender_subject_and_content(self):
        prompt = build_prompt(_request())

        assert not prompt.has_audio
        assert prompt.audio_data is None
        assert "Analyze the following email" in prompt.text
        assert "Sender: a@b.com" in prompt.text
        assert "Subject: Urgent!" in prompt.text
        assert "Content: Click here to verify your account now" in prompt.text

    def test_requests_all_risk_levels_and_fields(self):
        text = build_prompt(_request()).text
        for token in ('"safe"', '"suspicious"', '"scam"', '"phishing"',
                      "risk_score", "flagged_reasons", "analysis", "recommendations"):
            assert token in text

    def test_lists_signal_categories(self):
        text = build_prompt(_request()).text.lower()
        assert "spoofed sender" in text
        assert "urgency" in text
        assert "sensitive information" in text
        assert "too good to be true" in text
        assert "suspicious links" in text

    def test_subject_line_omitted_when_absent(self):
        prompt = build_prompt(_request(messageType="sms", sender="+14155550123", subject=None))
        assert "Subject:" not in prompt.text
        assert "Analyze the following sms" in prompt.text

    def test_call_transcript_uses_text_template(self):
        prompt = build_prompt(_request(messageType="call", sender="+14155550123", content="Pay the IRS now"))
        assert not prompt.has_audio
        assert "Content: Pay the IRS now" in prompt.text
        assert "Analyze the following call" in prompt.text

    def test_audio_on_non_call_is_ignored(self):
        prompt = build_prompt(_request(audioData="UklGRg=="))
        assert not prompt.has_audio
        assert "Content:" in prompt.text


class TestAudioTemplate:

    def test_call_with_audio_uses_audio_template(self):
        request = _request(
            messageType="call",
            sender="+14155550123",
            subject=None,
            content="transcript that should not be sent",
            audioData="UklGRiQAAABXQVZF",
        )
        assert request.message_type == MessageType.CALL

        prompt = build_prompt(request)

        assert prompt.has_audio
        assert prompt.audio_data == "UklGRiQAAABXQVZF"
        assert "phone call recording" in prompt.text
        assert "transcript that should not be sent" not in prompt.text
        assert "Content:" not in prompt.text
        assert "Background noises" in prompt.text
        assert "Script-like speech" in prompt.text
        assert "risk_level" in prompt.text


def test_system_prompt_demands_json():
    assert "JSON" in SYSTEM_PROMPT
