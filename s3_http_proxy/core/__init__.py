"""
Core proxy logic.

This module is framework-agnostic - it doesn't import FastAPI or boto3.
"""
