"""
livedonut - live donut chart over a Firestore collection.
"""

__version__ = "1.0.0"
