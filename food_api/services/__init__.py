"""
Services package.

- base_service: BaseService, BaseCRUDService
- domain: business logic (pricing, order workflow, settlement, CRUD)
- permissions: role policy
"""
