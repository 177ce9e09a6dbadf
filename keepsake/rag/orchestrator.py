"""
RAG orchestration: retrieve, assemble context, generate, and cite.
"""

from typing import Optional

from ..core.errors import InvalidQuery
from ..core.schema import AnswerResult, Source
from ..core.search_service import RetrievalFilter
from ..util.logging import logger
from .context import assemble

NO_CONTENT_ANSWER = (
    "I couldn't find any relevant content in your saved items to answer this question. "
    "Try saving some content related to this topic first!"
)

HIGH_CONFIDENCE = 0.7
MEDIUM_CONFIDENCE = 0.5


def confidence_from_similarity(similarity: float) -> str:
    if similarity > HIGH_CONFIDENCE:
        return "high"
    if similarity > MEDIUM_CONFIDENCE:
        return "medium"
    return "low"


class RAGService:
    """
    Question answering over saved content.

    Args:
        retriever: Retriever used for candidate selection
        generator: AnswerGenerator producing the final text
        doc_chars: document excerpt cap passed to the context assembler
    """

    def __init__(self, retriever, generator, doc_chars: int = None):
        self.retriever = retriever
        self.generator = generator
        self.doc_chars = doc_chars

    def answer_question(
        self,
        question: str,
        content_type: Optional[str] = None,
        date_filter: Optional[str] = None,
        limit: int = 5,
    ) -> AnswerResult:
        """
        Answer question from the top `limit` matching items.

        When nothing matches, a fixed answer with no sources and low
        confidence is returned and the generator is never called.
        """
        results = self.retriever.retrieve(
            question,
            RetrievalFilter(content_type=content_type, date_filter=date_filter),
            k=limit,
        )

        if not results:
            logger.log_answer(question, 0, "low")
            return AnswerResult(answer=NO_CONTENT_ANSWER, sources=[], confidence="low")

        context = assemble(results, self.doc_chars)
        answer = self.generator.generate(question, context)
        confidence = confidence_from_similarity(results[0].similarity)

        logger.log_answer(question, len(results), confidence)
        return AnswerResult(
            answer=answer,
            sources=[Source.from_result(r) for r in results],
            confidence=confidence,
        )

    def summarize_topic(
        self,
        topic: str,
        content_type: Optional[str] = None,
        date_filter: Optional[str] = None,
        limit: int = 5,
    ) -> AnswerResult:
        if not topic or not topic.strip():
            raise InvalidQuery("Topic cannot be empty")
        return self.answer_question(
            f"Summarize everything I've saved about: {topic}",
            content_type=content_type,
            date_filter=date_filter,
            limit=limit,
        )
