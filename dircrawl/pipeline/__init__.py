"""
Directory Contact Crawler - crawl pipeline

Field parsers, page extractor, detail visitor, pagination driver, session
gate, checkpointed writer and the orchestrator that sequences them.
"""

from .crawl import CrawlOrchestrator, CrawlResult
from .writer import CheckpointWriter

__all__ = ['CrawlOrchestrator', 'CrawlResult', 'CheckpointWriter']
