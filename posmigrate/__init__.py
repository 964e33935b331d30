"""
POS Data Migration Engine

Batch migration of a tenant's point-of-sale data from a hierarchical document
store (Firestore) into a relational store (Supabase / PostgREST).

Supports:
- Deterministic UUID derivation for source document ids
- Normalization of heterogeneous source timestamp encodings
- Relationship rebuilding through a pre-fetched reference index
- One typed mapper per entity type, run in dependency order
- Idempotent re-runs via upsert by primary key
- Provisioning of target auth identities for source users
"""

__version__ = "0.1.0"
