"""
Common building blocks shared by the classification pipeline and the tax
aggregation code.

This package contains reusable, domain-agnostic code:

- configuration loading (environment variables)
- logging configuration
- the OpenAI-compatible client and chat completion helper
- best-effort JSON extraction from free-form model output
"""
