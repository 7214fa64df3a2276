"""
CanvasKV Gateway: Services Package
===================================

What:  Business logic for the two route sets.

Service Inventory:
    - kv_service.py:      KVService (value lookup, prefix listing, bulk put/delete)
    - canvas_service.py:  CanvasService (canvas CRUD over metadata/data key pairs)

Services take the KVStore as an argument on every call and keep no state.
"""
