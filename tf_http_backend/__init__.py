"""Terraform HTTP state backend."""

__version__ = "0.1.0"
