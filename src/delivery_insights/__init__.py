# src/delivery_insights/__init__.py
from .pipelines.normalizer import Normalizer, normalize_rows
from .pipelines.preprocessor import Preprocessor
from .pipelines.report_builder import ReportBuilder, build_report
from .pipelines.report_processor import ReportProcessor
from .rules.aggregator import aggregate, overall_stats
from .rules.ranker import rank
from .rules.sentiment import analyze_sentiment, get_top_comments
from .rules.synthesis import synthesize

__all__ = [
    "Normalizer",
    "normalize_rows",
    "Preprocessor",
    "ReportBuilder",
    "build_report",
    "ReportProcessor",
    "aggregate",
    "overall_stats",
    "rank",
    "analyze_sentiment",
    "get_top_comments",
    "synthesize",
]
