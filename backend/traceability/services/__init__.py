# Services package init
"""
Traceability API — Services Layer
==================================

What:  Business logic layer sitting between routes (HTTP) and database (persistence).
Why:   Routes handle HTTP; services handle presence checks, ID generation and
       the translation of database failures into application exceptions.

Service Inventory:
    - TraceService: journey retrieval, product initialization, role logs
"""
