"""
Shared building blocks for the survey export services
"""
