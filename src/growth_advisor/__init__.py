"""
Growth Advisor

A growth advisory report engine: aggregates a student's records into a bounded
summary, requests a structured AI-generated growth report, and manages the
persisted widget layout and content overrides used to present it.
"""

__version__ = "0.1.0"
