"""Scrape endpoint serving the metric set over HTTP."""

from .scrape_server import METRICS_PATH, ScrapeServer, create_app

__all__ = ["METRICS_PATH", "ScrapeServer", "create_app"]
