"""
Retrieval-augmented answering over saved content.
"""

from .context import assemble
from .generator import AnswerGenerator, IGenerationProvider, OllamaGenerationProvider
from .orchestrator import RAGService, confidence_from_similarity

__all__ = [
    'assemble',
    'AnswerGenerator',
    'IGenerationProvider',
    'OllamaGenerationProvider',
    'RAGService',
    'confidence_from_similarity'
]
