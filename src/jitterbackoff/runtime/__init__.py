"""Runtime - Delay computation and waiting.

Contains: backoff.
"""
