"""
News Navigator

A news search service that splits a time range into date-bounded Google News
RSS queries, fetches them concurrently, merges and de-duplicates the results,
and optionally asks a generative model to analyze the headlines.
"""

__version__ = "1.0.0"
__author__ = "News Navigator Team"
__description__ = "Time-windowed Google News search with AI headline analysis"
