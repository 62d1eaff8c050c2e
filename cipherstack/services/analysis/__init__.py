"""Statistical and structural ciphertext analysis."""

from cipherstack.services.analysis.cryptanalysis import CryptanalysisEngine
from cipherstack.services.analysis.patterns import PatternDetector
from cipherstack.services.analysis.statistics import StatisticalAnalyzer

__all__ = [
    "CryptanalysisEngine",
    "PatternDetector",
    "StatisticalAnalyzer",
]
