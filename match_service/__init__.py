"""Package marker for the match service.

HTTP surface around the mission match engine.
"""

__version__ = "0.1.0"
