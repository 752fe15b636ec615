"""
Core modules for AI Chat Guard.

This package contains pricing, model selection, retry policy,
cancellation, failure classification and usage tracking.
"""
