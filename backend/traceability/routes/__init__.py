# Routes package init
"""
Traceability API — API Routes Package
======================================

Route Inventory:
    - health.py:    GET  /                     (liveness string)
                    GET  /health               (database check)
    - track.py:     GET  /api/track?id=...     (journey lookup)
    - products.py:  POST /api/product/init     (register product)
    - logs.py:      POST /api/log/farmer
                    POST /api/log/distributor
                    POST /api/log/retailer

Routes stay THIN: extract input, call TraceService, let the global
exception handlers turn errors into responses.
"""
