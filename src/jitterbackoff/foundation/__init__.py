"""Foundation - Core building blocks for jitterbackoff.

Contains: error handling, config, logging setup.
"""
