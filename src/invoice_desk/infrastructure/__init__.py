"""
Infrastructure
==============

Technical adapters shared by the bounded contexts:
- api_client: async HTTP client for the upstream invoicing API
"""
