"""Riskify SWMS backend: risk scoring, document assembly and PDF rendering."""

__version__ = "0.1.0"
