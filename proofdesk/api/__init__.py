"""
Proofdesk API - FastAPI application for operators and share-link viewers.
"""
