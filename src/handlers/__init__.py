"""
Lambda handlers package for AWS Lambda functions.
"""
from .insights import handler

__all__ = ["handler"]
