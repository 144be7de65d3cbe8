# Models package init
"""
Snap2Slides Backend: Domain Models
===================================

What:  In-memory records owned by services (no ORM).
    - Endpoint / ProviderType: one configured provider credential and its
      health state, owned by the EndpointPoolManager.
"""
