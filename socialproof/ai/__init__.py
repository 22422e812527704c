"""
SocialProof AI Module
=====================

AI-assisted review summaries:
- LLM clients (Anthropic, OpenAI)
- prompt assembly and response parsing for review analysis
- the override -> AI -> insight -> keyword resolution chain
- operator feedback learning
"""

from .llm_client import LLMClient, LLMProvider, LLMResponseError, get_llm_client
from .review_analyzer import AIAnalysis, ReviewAnalyzer
from .feedback import FeedbackLearner
from .resolution_chain import ResolutionChain, SummaryContext, empty_summary

__all__ = [
    "LLMClient",
    "LLMProvider",
    "LLMResponseError",
    "get_llm_client",
    "AIAnalysis",
    "ReviewAnalyzer",
    "FeedbackLearner",
    "ResolutionChain",
    "SummaryContext",
    "empty_summary",
]
