"""
Database Services Package
-------------------------
PostgreSQL services for the KYC onboarding system.

This package provides:
- Base service class with session and transaction management
- User service (credential store and admin user listing)
- KYC submission service (submission lifecycle and admin review)
- Schema bootstrap applied at startup
"""

from trustgate.psql_db_services.base_service import BaseDatabaseService
from trustgate.psql_db_services.users_service import UsersService
from trustgate.psql_db_services.kyc_service import KYCService
from trustgate.psql_db_services.schema import ensure_schema

__all__ = [
    "BaseDatabaseService",
    "UsersService",
    "KYCService",
    "ensure_schema",
]
