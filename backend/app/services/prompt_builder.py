"""
Prompt construction for the classification model.

Two templates share one output schema:
  - text:  emails, SMS and call transcripts (content is embedded)
  - audio: calls with an attached recording (content is omitted)
"""

from app.models.analysis import AnalysisPrompt, AnalysisRequest

SYSTEM_PROMPT = (
    "You are an expert cybersecurity analyst specializing in detecting scams, "
    "phishing, and fraudulent communications. Always respond with valid JSON only."
)

_OUTPUT_SCHEMA = """\
Provide a detailed analysis in JSON format with:
1. risk_level: "safe", "suspicious", "scam", or "phishing"
2. risk_score: number between 0 and 1 (0 = completely safe, 1 = definite scam)
3. flagged_reasons: {reasons_hint}
4. analysis: {analysis_hint}
5. recommendations: what the user should do"""

TEXT_PROMPT = """\
Analyze the following {message_type} for scam, phishing, or suspicious content.

{header}
Content: {content}

{schema}

Focus on detecting:
- Phishing attempts (fake login pages, credential theft)
- Scam patterns (too good to be true offers, fake prizes)
- Suspicious urgency tactics
- Mismatched domains or spoofed sender addresses
- Requests for sensitive information
- Suspicious links or attachments
- Social engineering attempts

Return ONLY valid JSON, no additional text."""

AUDIO_PROMPT = """\
Analyze this phone call recording for scam, phishing, or suspicious content.

{header}

Listen to the audio recording and analyze for:
- Voice characteristics and authenticity (robotic/synthetic voice, accent inconsistencies)
- Urgency or pressure tactics
- Requests for personal or financial information
- Background noises suggesting call center or spoofed number
- Script-like speech patterns common in scams
- Too-good-to-be-true offers or threats
- Social engineering techniques

{schema}

Return ONLY valid JSON, no additional text."""


def _header(request: AnalysisRequest) -> str:
    lines = [f"Sender: {request.sender}"]
    if request.subject:
        lines.append(f"Subject: {request.subject}")
    return "\n".join(lines)


def build_prompt(request: AnalysisRequest) -> AnalysisPrompt:
    """
    Build the instruction for a sanitized request.

    The audio template is used only for calls that carry ``audio_data``; a
    call submitted with just a transcript goes through the text template.
    """
    if request.has_audio:
        schema = _OUTPUT_SCHEMA.format(
            reasons_hint=(
                'array of specific reasons (e.g., "Robotic voice", '
                '"Pressure tactics", "Suspicious background noise")'
            ),
            analysis_hint="detailed explanation based on what you hear",
        )
        text = AUDIO_PROMPT.format(header=_header(request), schema=schema)
        return AnalysisPrompt(text=text, audio_data=request.audio_data)

    schema = _OUTPUT_SCHEMA.format(
        reasons_hint=(
            'array of specific reasons why this was flagged (e.g., "Suspicious domain", '
            '"Urgency tactics", "Too good to be true")'
        ),
        analysis_hint="detailed explanation of why you classified it this way",
    )
    text = TEXT_PROMPT.format(
        message_type=request.message_type.value,
        header=_header(request),
        content=request.content or "",
        schema=schema,
    )
    return AnalysisPrompt(text=text)
