"""Firecrawl scraping and HTML content parsing."""
