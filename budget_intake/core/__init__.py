"""Core package: settings, shared models, buckets, text helpers and database access."""
