"""Domain services: metadata lookups, book intake, catalog, copies and audit."""
