"""
Owner Resolver — turns scraped property-ownership strings into clean owners.

Architecture: Normalize → Split → Classify → Parse → Validate → Dedup → Timeline
Philosophy:  Reject rather than guess. Every rejected string is kept with a reason.
"""

__version__ = "1.0.0"
