"""Internal constants shared across the library."""

#: Maximum number of identifiers accepted by a single "id in list" query.
ARRAY_QUERIES_ITEM_LIMIT = 10

BASE_URL = "https://firestore.googleapis.com"
DEFAULT_DATABASE = "(default)"
USER_AGENT = "pydocrepo"

# Firestore addresses the document id through this pseudo field path.
DOCUMENT_ID_FIELD = "__name__"
