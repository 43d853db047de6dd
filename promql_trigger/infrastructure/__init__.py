"""
Infrastructure Module

HTTP clients for external services: the log-cache PromQL API and the
platform API (CAPI).
"""
