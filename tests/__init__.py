"""
Test suite for the appointment booking API.

Contains unit and integration tests for the application's functionality.
"""
import os

# Set environment for testing before the settings object is created
os.environ["TESTING"] = "1"
os.environ["PASSWORD_HASH_ROUNDS"] = "4"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["TOKEN_SCHEME"] = "jwt"
