"""
SpendWise - Source Package

A personal expense tracker with optional AI helpers for scanning
receipts and suggesting categories.

DESIGN PRINCIPLES:
1. AI suggests → Human confirms → System saves
2. Validate before anything reaches the repository
3. Storage failures never take the app down
4. Every mutation is logged
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "SpendWise Team"
