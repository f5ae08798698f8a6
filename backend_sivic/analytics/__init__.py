"""
Detectors: account classification plus the token and program step runners.
"""

from backend_sivic.analytics.classifier import classify, validate_address
from backend_sivic.analytics.program_detector import ProgramDetector, ProgramThresholds
from backend_sivic.analytics.token_detector import TokenDetector, TokenThresholds

__all__ = [
    "ProgramDetector",
    "ProgramThresholds",
    "TokenDetector",
    "TokenThresholds",
    "classify",
    "validate_address",
]
