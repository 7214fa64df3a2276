"""
CanvasKV Gateway: API Routes Package
=====================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - kv.py:        GET /values/{key}, GET /keys, PUT /bulk, DELETE /bulk
    - canvases.py:  /api/canvases CRUD (list, create, load, save, delete, rename)
    - health.py:    GET /health

Routes stay thin: extract request data, call a service, pick the status code.
"""
