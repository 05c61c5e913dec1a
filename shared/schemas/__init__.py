"""Pydantic v2 schemas shared between the API, the analysis pipeline, and frontend types."""

from .analysis import *  # noqa: F401,F403
from .errors import *  # noqa: F401,F403
from .api import *  # noqa: F401,F403
