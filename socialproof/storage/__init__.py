"""
SocialProof Storage
===================

JSON snapshot persistence for products, reviews, insights, feedback and
overrides.
"""

from .json_store import JsonStore

__all__ = ["JsonStore"]
