"""
Application Layer

FastAPI application, registration API and application services.
"""
