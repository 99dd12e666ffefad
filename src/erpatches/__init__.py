"""Eternal Return balance patch tracker."""

__version__ = "0.1.0"
