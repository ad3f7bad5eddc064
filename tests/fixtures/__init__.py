"""Test fixture package for the Terraform HTTP backend.

Contains fixtures for:
- State stores on temporary directories
- FastAPI applications and HTTP clients
"""
