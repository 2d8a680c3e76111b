# Routes package init
"""
Customer Details Backend — API Routes Package
===============================================

Route Inventory:
    - users.py:   /api/User/...            (customer and login endpoints)
                  /api/User/v{version}/... (same endpoints, versioned path)
    - health.py:  GET /health              (service health check)

Routes stay thin: extract parameters, call a service, return its model.
"""
