"""
API Schemas - Pydantic models for request/response validation

These schemas define the contract between the API and clients.
Documents coming out of the repositories are validated into them before
being returned.
"""
