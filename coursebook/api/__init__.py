"""
API module exposing the registry over REST.
"""

from .rest_api import CoursebookRestAPI

__all__ = [
    "CoursebookRestAPI",
]
