"""
Test suite for the clinic appointment booking service.

Contains unit tests for the booking core and API tests for every router.
"""
import os

# Set environment for testing
os.environ["TESTING"] = "1"
