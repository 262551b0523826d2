"""
nano-food REST API application package.

Structure:
    routers (thin controllers)
        ↓
    services (business logic: pricing, order workflow, settlement)
        ↓
    repositories (data access)
        ↓
    models (SQLAlchemy entities)
"""

__version__ = "0.1.0"
