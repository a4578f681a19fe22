"""
caltrack - Workout calorie estimation and history service.
"""

__version__ = "1.0.0"
