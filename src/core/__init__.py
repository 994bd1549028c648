"""
Core business logic for the bucket browser.

This module is framework-agnostic - it doesn't import FastAPI, boto3,
Pillow, or any infrastructure concerns. This separation means we can test
the thumbnail cache policy in isolation with fake collaborators.
"""
