"""
SocialProof Orchestrator
========================

Service facade, logging configuration and command-line interface.
"""

from .logging_config import setup_logging, JSONFormatter, ConsoleFormatter
from .service import SocialProofService

__all__ = ["setup_logging", "JSONFormatter", "ConsoleFormatter", "SocialProofService"]
