"""Schema migration units, applied in the order declared by ``chainscope.migrations.MIGRATIONS``."""
