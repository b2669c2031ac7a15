"""
Services module for business logic.

- domain/: Application services (business logic), one per table
- permissions/: Strategy pattern for row-level access control
- base_service.py: Shared plumbing for domain services

Usage:
    from rest_api.services.domain import VendorService
    from rest_api.services.permissions import PermissionContext

    service = VendorService(db)
    vendors = service.list_vendors(search="dosa")
"""
