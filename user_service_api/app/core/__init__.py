"""Cross-cutting infrastructure: configuration, logging, tracing, errors and storage."""
