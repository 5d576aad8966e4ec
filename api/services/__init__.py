"""Service layer for business logic.

Services encapsulate the catalog rules, keeping routes thin and focused
on HTTP handling.

Layer hierarchy:
    Routes (HTTP) -> Services (Business Logic) -> Repositories (Database)

Services should:
- Validate every rule before staging a write
- Orchestrate calls to repositories
- Raise domain errors from ``services.errors`` (never HTTPException)
- Flush, but never commit; the request session owns the transaction

Services should NOT:
- Directly execute SQL queries (use repositories)
- Know about HTTP request/response details
"""
