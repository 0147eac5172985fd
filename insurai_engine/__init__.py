"""
InsurAI Engine
==============

Reconciliation and lifecycle engine for the InsurAI dashboards.

Joins claims, people and policy records from independent sources into
enriched views, derives dashboard statistics from them, and manages the
optimistic lifecycle of support-query responses.
"""

__version__ = "0.1.0"
__author__ = "InsurAI"
