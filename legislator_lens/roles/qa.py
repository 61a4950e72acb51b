"""
Legislator Lens - bill Q&A role
Conversational questions about one bill on the on-device prompt model.
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from ..core.cancellation import CancelSignal
from ..core.exceptions import (
    AnalysisCancelledError,
    LegislatorLensError,
    MalformedResponseError,
    ValidationError,
)
from ..core.text_budget import truncate_head
from ..core.validators import require_text
from ..models.qa import QAMessage, QASession
from .analyst import OnDeviceAnalyst

logger = logging.getLogger(__name__)

# bill text kept as conversation context
QA_CONTEXT_TOKENS = 3000
# messages replayed into each prompt, i.e. the last three exchanges
HISTORY_WINDOW = 6
MAX_FOLLOW_UPS = 5

FALLBACK_FOLLOW_UPS = [
    "What are the main provisions of this bill?",
    "Who would be most affected by this legislation?",
    "Are there any controversial aspects to this bill?",
]

GENERIC_FOLLOW_UPS = [
    "What are the key points of this bill?",
    "How would this affect me?",
    "What happens next with this bill?",
]


def _transcript(messages: List[QAMessage]) -> str:
    return "\n".join(f"{m.role}: {m.content}" for m in messages[-HISTORY_WINDOW:])


class BillQA(OnDeviceAnalyst):
    """
    Q&A role.

    Single questions go through `quick_answer`; conversations keep their
    history in a BillQASession, which replays it into each prompt.
    """
    component = "QA"

    def __init__(self, capability, config):
        super().__init__(capability, config)
        self.system_template = self._load_prompt(
            "qa_system_prompt.md",
            "You are helping citizens understand the congressional bill \"{bill_title}\". "
            "Answer plainly and neutrally, and say so when you don't know.",
        )
        self.ask_template = self._load_prompt(
            "qa_ask_prompt.md",
            "Bill information:\n{context}\n\nConversation so far:\n{conversation}\n\nQuestion: {question}",
        )
        self.follow_up_template = self._load_prompt(
            "qa_follow_up_prompt.md",
            "Suggest 3-5 follow-up questions about \"{bill_title}\" as a JSON array of strings.\n"
            "Summary: {summary}\nConversation:\n{conversation}",
        )
        self.quick_answer_template = self._load_prompt(
            "qa_quick_answer_prompt.md",
            "Answer in 2-3 sentences.\nBill: {bill_title}\nSummary: {summary}\nQuestion: {question}",
        )

    def start_session(self, bill_title: str, bill_text: str, bill_summary: Optional[str] = None) -> "BillQASession":
        return BillQASession(self, bill_title, bill_text, bill_summary)

    async def answer(self, bill_title: str, context: str, history: List[QAMessage], question: str,
                     signal: Optional[CancelSignal] = None) -> str:
        """Answer one question given the bill context and the conversation so far."""
        prompt = self.ask_template.format(
            context=context,
            conversation=_transcript(history) or "(none yet)",
            question=question,
        )
        system_prompt = self.system_template.format(bill_title=bill_title)
        response = await self._prompt(prompt, signal, system_prompt=system_prompt)
        return response.strip()

    @require_text("bill_title", "question")
    async def quick_answer(self, bill_title: str, bill_summary: str, question: str,
                           signal: Optional[CancelSignal] = None) -> str:
        """Short stand-alone answer from the title and summary alone."""
        prompt = self.quick_answer_template.format(bill_title=bill_title, summary=bill_summary or "", question=question)
        response = await self._prompt(prompt, signal)
        return response.strip()

    async def suggest_follow_up_questions(self, bill_title: str, bill_summary: str,
                                          history: Optional[List[QAMessage]] = None,
                                          signal: Optional[CancelSignal] = None) -> List[str]:
        """
        3-5 follow-up questions building on the conversation.

        Never fails for a bad or missing model answer: unparseable output gets
        a set of bill-exploration questions, any other failure a generic set.

        :raises AnalysisCancelledError: the signal fired
        """
        prompt = self.follow_up_template.format(
            bill_title=bill_title,
            summary=bill_summary or "",
            conversation=_transcript(history or []) or "(none yet)",
        )
        try:
            response = await self._prompt(prompt, signal)
        except AnalysisCancelledError:
            raise
        except LegislatorLensError as e:
            logger.warning(f"LegislatorLens[QA]: follow-up questions unavailable: {type(e).__name__}: {e}")
            return list(GENERIC_FOLLOW_UPS)

        try:
            raw = self._parse(response, expected_type=list)
        except MalformedResponseError:
            return list(FALLBACK_FOLLOW_UPS)
        questions = [str(q).strip() for q in raw if isinstance(q, str) and q.strip()]
        return questions[:MAX_FOLLOW_UPS] or list(FALLBACK_FOLLOW_UPS)


class BillQASession:
    """
    Conversation about one bill.

    Holds no model session between questions: each question opens its own
    session and carries the recent history in its prompt.
    """

    def __init__(self, qa: BillQA, bill_title: str, bill_text: str, bill_summary: Optional[str] = None):
        self.qa = qa
        self.bill_title = bill_title
        self.session_id = f"qa-{uuid.uuid4().hex[:12]}"
        self.created_at = datetime.now(timezone.utc)
        self.messages: List[QAMessage] = []

        context_parts = []
        if bill_summary:
            context_parts.append(f"Summary: {bill_summary}")
        context_parts.append(truncate_head(bill_text, QA_CONTEXT_TOKENS, qa.encoding))
        self.context = "\n\n".join(context_parts)

    async def ask(self, question: str, signal: Optional[CancelSignal] = None) -> str:
        """
        Ask the next question. A failed question leaves the history untouched.

        :raises ValidationError: blank question
        """
        if not question or not question.strip():
            raise ValidationError("Question cannot be empty")
        answer = await self.qa.answer(self.bill_title, self.context, self.messages, question, signal=signal)
        self.messages.append(QAMessage(role="user", content=question))
        self.messages.append(QAMessage(role="assistant", content=answer))
        logger.debug(f"LegislatorLens[QA]: {self.session_id} answered question {len(self.messages) // 2}")
        return answer

    async def suggest_follow_up_questions(self, bill_summary: str = "",
                                          signal: Optional[CancelSignal] = None) -> List[str]:
        return await self.qa.suggest_follow_up_questions(self.bill_title, bill_summary, self.messages, signal=signal)

    def history(self) -> List[QAMessage]:
        return list(self.messages)

    def snapshot(self) -> QASession:
        return QASession(
            session_id=self.session_id,
            bill_title=self.bill_title,
            messages=self.history(),
            created_at=self.created_at,
        )

    def clear_history(self):
        """Forget the conversation; the bill context stays."""
        self.messages = []
