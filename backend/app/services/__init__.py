# Services package init
"""
TouristMap Backend: Services Package
======================================

What:  Persistence contract, its SQLite implementation, and the service the
       routes call.

Service Inventory:
    - storage_base.py:  PinStore, the abstract access contract
    - sqlite_store.py:  SQLiteStore, the SQLite storage engine
    - pin_service.py:   PinService, delegation + error normalization
"""
