# ecieskit Test Suite
"""
Comprehensive test suite including:
- Unit tests (key agreement, KDF, cipher, framing, config)
- Engine and pipeline tests
- Security tests (tampering, invalid inputs)
- Integration tests (event logging, concurrency)

Run with: pytest
Coverage: coverage run -m pytest && coverage report
"""
