"""Candidate evaluation pipeline: resume screening and interview scoring."""

__version__ = "0.1.0"
