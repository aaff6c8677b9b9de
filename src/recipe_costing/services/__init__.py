"""
Service layer for Recipe Costing.

Catalog CRUD, costing entry points, JSON and spreadsheet import/export and
reports. Services are stateless module-level functions; each opens its own
transaction with session_scope().
"""
