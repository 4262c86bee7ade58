"""图表分析模块"""

from .base import AnalysisKind, AnalysisValue, AnalysisResult, AnalysisResults
from .chrono import ChronoAnalysisBasis, ChronoAnalysisRange, ChronoAnalysisOpts
from .trend import TrendAnalysisType, CrossOptions, TrendAnalysisOpts
from .category import CategoryGraphType, CategoryGraphOpts
from .geo import GeoGraphScope, GeoGraphOpts
from .visualize import VisualizeDB

__all__ = [
    "AnalysisKind",
    "AnalysisValue",
    "AnalysisResult",
    "AnalysisResults",
    "ChronoAnalysisBasis",
    "ChronoAnalysisRange",
    "ChronoAnalysisOpts",
    "TrendAnalysisType",
    "CrossOptions",
    "TrendAnalysisOpts",
    "CategoryGraphType",
    "CategoryGraphOpts",
    "GeoGraphScope",
    "GeoGraphOpts",
    "VisualizeDB",
]
