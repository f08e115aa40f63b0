"""Roastr: share, vote on and save short tagged roasts."""

__version__ = "0.1.0"
