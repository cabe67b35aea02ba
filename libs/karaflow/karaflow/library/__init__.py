"""Content library backends."""

from karaflow.library.base import ContentLibrary
from karaflow.library.local import LanguageDetector, LocalContentLibrary, MediaSource

__all__ = ["ContentLibrary", "LanguageDetector", "LocalContentLibrary", "MediaSource"]
