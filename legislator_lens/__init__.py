"""
Legislator Lens - hybrid on-device and cloud analysis of congressional bills
"""
from .core.cancellation import CancelSignal
from .core.exceptions import (
    AnalysisCancelledError,
    ClientError,
    LegislatorLensError,
    MalformedResponseError,
    QuotaExceededError,
    SessionTimeoutError,
    UnavailableError,
    ValidationError,
)
from .main import LegislatorLens
from .models.analysis import AnalysisLevel, AnalysisOptions, CompositeAnalysis, options_for_level
from .models.letter import GeneratedLetter, LetterInput
from .roles.aggregator import Aggregator, recommend_analysis_level
from .roles.letter_writer import check_letter_quality, suggested_key_points, template_guidance

__version__ = "0.1.0"

__all__ = [
    "Aggregator",
    "AnalysisCancelledError",
    "AnalysisLevel",
    "AnalysisOptions",
    "CancelSignal",
    "ClientError",
    "CompositeAnalysis",
    "GeneratedLetter",
    "LegislatorLens",
    "LegislatorLensError",
    "LetterInput",
    "MalformedResponseError",
    "QuotaExceededError",
    "SessionTimeoutError",
    "UnavailableError",
    "ValidationError",
    "check_letter_quality",
    "options_for_level",
    "recommend_analysis_level",
    "suggested_key_points",
    "template_guidance",
]
