"""On-disk workspace: ids, paths, the JSON document store and scaffolding."""
