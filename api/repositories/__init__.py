"""
API Repositories - Data access abstraction layer

Provides one interface for data retrieval that can be backed by MongoDB
(deployments) or local joblib-persisted files (development and tests).

Pattern: Repository Pattern
"""
