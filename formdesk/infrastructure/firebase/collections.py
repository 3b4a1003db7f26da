"""Firestore collection names (schema-in-code).

Firestore has no DDL or migrations. Collections are created automatically
when you first write a document. Use these constants so collection names
stay consistent.
"""

# Principals: one collection per kind, so uniqueness scopes stay simple queries.
COLLECTION_TENANT_OWNERS = "tenant_owners"
COLLECTION_MANAGED_USERS = "managed_users"
COLLECTION_STANDALONE_USERS = "standalone_users"

COLLECTION_FORMS = "forms"
COLLECTION_SUBMISSIONS = "submissions"
