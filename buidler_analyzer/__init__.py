"""Buidler Analyzer: GitHub health scoring over the REST API."""

__version__ = "1.0.0"
