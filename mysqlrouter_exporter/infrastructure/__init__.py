"""
Infrastructure Layer

Concrete implementations of the application interfaces:
- Metric set backed by prometheus_client
- MySQL Router REST API client backed by httpx
- Retry with exponential backoff
- Structured logging
- Scrape server (FastAPI + uvicorn)
"""
