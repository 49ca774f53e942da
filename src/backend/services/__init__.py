"""
Business logic over the ORM session.

Every function takes the request's ``Session`` first and raises the domain
errors from ``src.backend.errors``; routes stay thin.
"""
