"""Storage core for chainscope.

Identity composition, closed domains, payload mapping, upserts and the
generic paginated query layer over the relational entity tables.
"""
