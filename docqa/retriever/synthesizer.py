"""
Synthesizer

Grounded answer generation from assembled evidence.

Each route has its own prompt template, and both instruct the model to reply
with a fixed sentinel when the evidence does not contain the answer. Output
is post-processed so callers always see the same wording for "not found",
whatever phrasing the model chose:
- provider failure      -> fixed apology (never the raw error)
- empty output          -> fixed apology
- sentinel / refusal    -> fixed "couldn't find that information" message
"""

import logging
from typing import Optional

logger = logging.getLogger("docqa.retriever.synthesizer")

NOT_FOUND_SENTINEL = "ANSWER_NOT_FOUND"

# Lower-case phrases that mark a negative answer.
NOT_FOUND_PHRASES = ("answer_not_found", "i don't have", "cannot find")

NOT_FOUND_ANSWER = "I searched through your documents but couldn't find that specific information."
EMPTY_RESPONSE_ANSWER = "I'm sorry, I encountered an issue processing your request."
BACKEND_FAILURE_ANSWER = "I apologize, but I'm having trouble accessing your documents right now."


SIMILARITY_PROMPT = """You are a professional enterprise document retrieval assistant.
Answer the user's question based ONLY on the provided information.
Be extremely concise, direct, and to the point. Do not add filler words, conversational fluff, or unsolicited advice.
Respond with the exact answer requested.
If you cannot find the answer in the provided documents, reply exactly with: "{sentinel}"

USER QUESTION: {question}

AVAILABLE INFORMATION:
{context}

ANSWER:
"""

AGGREGATE_PROMPT = """You are a professional enterprise data analyst evaluating multiple documents.
Compare and correlate the user's documents based ONLY on the provided metadata.
Be extremely concise, direct, and to the point. No fluff or conversational filler.
Answer only what was asked. If comparing, state the exact values from each document and the conclusion clearly and briefly.
If the required information is missing, reply exactly with: "{sentinel}"

USER QUESTION: {question}

USER'S DOCUMENTS AND METADATA:
{context}

ANALYSIS:
"""


def build_similarity_prompt(question: str, context: str) -> str:
    return SIMILARITY_PROMPT.format(sentinel=NOT_FOUND_SENTINEL, question=question, context=context)


def build_aggregate_prompt(question: str, context: str) -> str:
    return AGGREGATE_PROMPT.format(sentinel=NOT_FOUND_SENTINEL, question=question, context=context)


def is_not_found(text: str) -> bool:
    lowered = text.lower()
    return any(phrase in lowered for phrase in NOT_FOUND_PHRASES)


class Synthesizer:
    """
    Calls the generation model once per prompt and normalizes the result.

    No retries: a failed call degrades to a fixed message.
    """

    def __init__(
        self,
        llm_client=None,
        max_tokens: int = 1000,
        temperature: Optional[float] = 0.1,
        timeout: float = 30.0,
    ):
        """
        Initialize synthesizer.

        Args:
            llm_client: LLMClient (or compatible) for answer generation
            max_tokens: Output token ceiling
            temperature: Sampling temperature
            timeout: Per-call timeout in seconds
        """
        self._llm = llm_client
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._timeout = timeout

    @property
    def has_llm(self) -> bool:
        """Check if LLM is available"""
        return self._llm is not None and self._llm.is_available

    def invoke(self, prompt: str) -> str:
        """
        Generate an answer for a fully rendered prompt.

        Returns:
            The trimmed model answer, or one of the fixed messages
        """
        try:
            response = self._llm.generate(
                prompt,
                max_tokens=self._max_tokens,
                temperature=self._temperature,
                timeout=self._timeout,
            )
        except Exception as e:
            logger.error("LLM call failed: %s", e)
            return BACKEND_FAILURE_ANSWER

        answer = (response or "").strip()
        if not answer:
            logger.warning("LLM returned an empty response")
            return EMPTY_RESPONSE_ANSWER

        if is_not_found(answer):
            logger.info("LLM reported the answer is not in the evidence")
            return NOT_FOUND_ANSWER

        return answer
