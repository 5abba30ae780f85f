"""Treatment catalogue loaders (local file and HTTP)."""
