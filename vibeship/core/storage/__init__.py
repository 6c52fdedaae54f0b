"""Storage layer: relational database and screenshot object store."""
