"""
LLM Japanese Knowledge Plugin

Track the words you meet in Japanese text, schedule them with spaced
repetition and review each one through its most readable sentence.
"""

from . import errors
from . import frequency
from . import scheduler
from . import structured
from . import text
from . import db
from . import exercises
from . import plugin

__version__ = "0.1.0"
__all__ = ["errors", "frequency", "scheduler", "structured", "text", "db", "exercises", "plugin"]
