"""
Legislator Lens - letter writer role
Drafts letters to representatives with the on-device writer model, plus the
letter templates and a heuristic quality check for the drafts.
"""
import logging
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from ..clients.on_device import open_session
from ..core.cancellation import CancelSignal, run_cancellable
from ..core.exceptions import ClientError, LegislatorLensError, MalformedResponseError, ValidationError
from ..core.log import log_llm_interaction
from ..models.letter import GeneratedLetter, LetterInput, QualityCheck, TemplateGuidance
from .analyst import OnDeviceAnalyst

logger = logging.getLogger(__name__)

WRITER_CONTEXT = "Professional correspondence to elected representatives about legislation"

VARIATION_TONES = ("formal", "neutral", "casual")
MAX_SUGGESTED_POINTS = 5

OPENINGS = {
    "support": "I am writing to express my strong support for",
    "oppose": "I am writing to express my opposition to",
    "concerned": "I am writing to share my concerns about",
    "neutral": "I am writing to share my perspective on",
}

TEMPLATES: Dict[str, TemplateGuidance] = {
    "support": TemplateGuidance(
        title="Letter of Support",
        description="Express your support for the bill and why you believe it should pass",
        suggested_points=[
            "Why this bill matters to you personally",
            "How it will benefit your community",
            "Addressing potential concerns about the bill",
            "Requesting the representative to vote in favor",
        ],
        tone="formal",
    ),
    "oppose": TemplateGuidance(
        title="Letter of Opposition",
        description="Express concerns about the bill and suggest alternatives",
        suggested_points=[
            "Specific provisions you find problematic",
            "Potential negative impacts on your community",
            "Alternative approaches to consider",
            "Requesting the representative to vote against or amend",
        ],
        tone="formal",
    ),
    "request-information": TemplateGuidance(
        title="Request for Information",
        description="Ask your representative for clarification or information about the bill",
        suggested_points=[
            "Specific questions about bill provisions",
            "Request for the representative's position",
            "Ask about potential impacts",
            "Request for updates on bill status",
        ],
        tone="neutral",
    ),
    "share-story": TemplateGuidance(
        title="Personal Story",
        description="Share how this issue affects you personally",
        suggested_points=[
            "Your personal experience with this issue",
            "How the bill would change your situation",
            "What you hope the representative will do",
            "Offer to provide more details if helpful",
        ],
        tone="neutral",
    ),
    "request-meeting": TemplateGuidance(
        title="Meeting Request",
        description="Request a meeting to discuss the bill",
        suggested_points=[
            "Why you want to meet in person or virtually",
            "Brief overview of your concerns or support",
            "Suggested timeframes for meeting",
            "How you can be reached",
        ],
        tone="formal",
    ),
    "thank-you": TemplateGuidance(
        title="Thank You Letter",
        description="Thank your representative for their position or action",
        suggested_points=[
            "Specific action you're thanking them for",
            "Why their action matters to you",
            "How it impacts your community",
            "Encouragement to continue this approach",
        ],
        tone="formal",
    ),
    "custom": TemplateGuidance(
        title="Custom Letter",
        description="Create your own letter structure",
        suggested_points=["Main point 1", "Main point 2", "Main point 3"],
        tone="neutral",
    ),
}

# points put ahead of the template's own, per position
_POSITION_POINTS = {
    "support": [
        "Benefits of this legislation for constituents",
        "How this aligns with community values",
        "Economic or social impact of passing this bill",
    ],
    "oppose": [
        "Concerns about unintended consequences",
        "Alternative solutions to consider",
        "Potential burden on constituents",
    ],
}


def template_guidance(template: str) -> TemplateGuidance:
    """Guidance for a letter template; unknown templates get the custom one."""
    return TEMPLATES.get(template, TEMPLATES["custom"])


def suggested_key_points(template: str, position: str) -> List[str]:
    points = _POSITION_POINTS.get(position, []) + template_guidance(template).suggested_points
    return points[:MAX_SUGGESTED_POINTS]


def count_words(text: str) -> int:
    return len(text.split())


def check_letter_quality(letter: GeneratedLetter) -> QualityCheck:
    """
    Heuristic 0-100 score of a drafted letter.

    Starts at 70 and moves with length, personal voice, a call to action,
    courtesy and average word length.
    """
    content = letter.content.lower()
    word_count = letter.word_count
    strengths: List[str] = []
    improvements: List[str] = []
    score = 70

    if 150 <= word_count <= 400:
        strengths.append("Good length - concise but detailed")
        score += 10
    elif word_count < 100:
        improvements.append("Consider adding more detail to strengthen your points")
        score -= 10
    elif word_count > 500:
        improvements.append("Consider making your letter more concise")
        score -= 5

    if "i " in content or "my " in content:
        strengths.append("Includes personal perspective")
        score += 5
    else:
        improvements.append("Adding personal context makes letters more impactful")

    if any(word in content for word in ("request", "ask", "urge")):
        strengths.append("Clear call to action")
        score += 5
    else:
        improvements.append("Include a specific request or call to action")
        score -= 5

    if "respectfully" in content or "sincerely" in content:
        strengths.append("Maintains respectful tone")
        score += 5

    average_word_length = len(letter.content) / word_count if word_count else 0
    if average_word_length < 5:
        readability = "easy"
    elif average_word_length < 6.5:
        readability = "moderate"
        strengths.append("Good readability level")
        score += 5
    else:
        readability = "complex"

    return QualityCheck(
        score=max(0, min(100, score)),
        strengths=strengths,
        improvements=improvements,
        word_count=word_count,
        readability_level=readability,
    )


class LetterWriter(OnDeviceAnalyst):
    """
    Writer role.
    Each letter opens its own writer session with the letter's tone and length.
    """
    component = "Writer"

    def __init__(self, capability, config):
        super().__init__(capability, config)
        self.letter_template = self._load_prompt(
            "letter_prompt.md",
            "Write a letter to {recipient_title} {recipient_name} about \"{bill_reference}\".\n"
            "Opening: {opening} this legislation.\n{personal_context}Key Points:\n{key_points}\n"
            "{specific_request}{call_to_action}",
        )

    @staticmethod
    def coerce_input(letter: Union[LetterInput, Dict[str, Any]]) -> LetterInput:
        """
        :raises ValidationError: missing recipient, bill title or key points
        """
        if isinstance(letter, LetterInput):
            return letter
        try:
            return LetterInput.model_validate(letter)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid letter input: {e}") from e

    def build_prompt(self, letter: LetterInput) -> str:
        bill_reference = f"{letter.bill_title} ({letter.bill_number})" if letter.bill_number else letter.bill_title
        personal_context = f"Personal Context: {letter.personal_story}\n\n" if letter.personal_story else ""
        specific_request = f"\nSpecific Request: {letter.specific_request}\n" if letter.specific_request else ""
        call_to_action = (
            "\nInclude a clear call to action asking the representative to take specific action on this bill.\n"
            if letter.include_call_to_action else ""
        )
        return self.letter_template.format(
            recipient_title=letter.recipient_title,
            recipient_name=letter.recipient_name,
            bill_reference=bill_reference,
            opening=OPENINGS[letter.position],
            personal_context=personal_context,
            key_points="\n".join(f"{i}. {point}" for i, point in enumerate(letter.key_points, 1)),
            specific_request=specific_request,
            call_to_action=call_to_action,
        )

    async def generate_letter(self, letter: Union[LetterInput, Dict[str, Any]],
                              signal: Optional[CancelSignal] = None) -> GeneratedLetter:
        """
        Draft one letter.

        :raises ValidationError: invalid letter input
        :raises MalformedResponseError: the writer returned nothing
        """
        letter = self.coerce_input(letter)
        prompt = self.build_prompt(letter)
        try:
            async with open_session(self.capability, timeout=self.session_timeout, signal=signal,
                                    shared_context=WRITER_CONTEXT, tone=letter.tone,
                                    length=letter.length) as session:
                content = await run_cancellable(session.write(prompt), signal)
        except LegislatorLensError:
            raise
        except Exception as e:
            logger.error(f"LegislatorLens[Writer]: writer call failed: {e}", exc_info=True)
            raise ClientError(f"Writer call failed: {e}") from e

        log_llm_interaction(self.component, prompt, content)
        content = (content or "").strip()
        if not content:
            raise MalformedResponseError("Writer returned an empty letter")

        logger.info(f"LegislatorLens[Writer]: {letter.tone} letter on '{letter.bill_title}', "
                    f"{count_words(content)} words")
        return GeneratedLetter(content=content, tone=letter.tone, length=letter.length,
                               word_count=count_words(content))

    async def generate_letter_variations(self, letter: Union[LetterInput, Dict[str, Any]], count: int = 3,
                                         signal: Optional[CancelSignal] = None) -> List[GeneratedLetter]:
        """Up to three drafts of the same letter, one per tone: formal, neutral, casual."""
        letter = self.coerce_input(letter)
        variations = []
        for tone in VARIATION_TONES[:max(0, min(count, len(VARIATION_TONES)))]:
            variations.append(await self.generate_letter(letter.model_copy(update={"tone": tone}), signal=signal))
        return variations
