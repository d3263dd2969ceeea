"""Salesforce objects presented as relational database metadata."""

__version__ = "0.1.0"
