"""Core utilities and shared infrastructure.

- config: Configuration loading and validation
- constants: Thresholds, precision tiers, outcome and failure-step enums
- exceptions: Custom exception hierarchy
- ingress: Request parsing and client factories for the host wiring
"""
