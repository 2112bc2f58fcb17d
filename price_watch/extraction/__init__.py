"""Price extraction pipeline and its strategies."""
from price_watch.extraction.pipeline import PricePipeline, extract_price
from price_watch.extraction.strategies import DEFAULT_STRATEGIES, ExtractionContext, Strategy

__all__ = ["PricePipeline", "extract_price", "DEFAULT_STRATEGIES", "ExtractionContext", "Strategy"]
