"""
Services Module

Exports all service classes.
"""
from podbridge.services.feed_fetcher import FeedFetcher
from podbridge.services.show_resolver import ShowResolver
from podbridge.services.dedup_gate import DeduplicationGate
from podbridge.services.federation_service import FederationDispatcher
from podbridge.services.show_service import ShowService
from podbridge.services.post_service import PostService
from podbridge.services.rss_export_service import RssExportService

__all__ = [
    "FeedFetcher",
    "ShowResolver",
    "DeduplicationGate",
    "FederationDispatcher",
    "ShowService",
    "PostService",
    "RssExportService",
]
