"""
Itinerary Planner - Around-the-world flight itinerary search service
"""

__version__ = "1.0.0"
