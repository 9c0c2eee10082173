"""
TVGate Test Suite

Test Categories:
- unit/: Fast, isolated unit tests
- integration/: HTTP API tests against a running player service
"""
