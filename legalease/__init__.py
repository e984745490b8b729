"""
LegalEase: plain-language analysis of legal documents.

Extracts text from uploaded documents, asks Gemini to identify and explain
the clauses, and answers questions and translates results for lay readers.
"""

__version__ = "1.0.0"
