"""Terminal presentation layer."""

from moviehub.ui.app import KeyBindings, MovieHubApp
from moviehub.ui.views import Line

__all__ = ["KeyBindings", "Line", "MovieHubApp"]
