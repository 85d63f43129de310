"""chainscope: a cross-network explorer for on-chain risk intelligence.

This package stores the addresses, assets, cases and reporters published on
independent blockchain networks under a network-qualified identity scheme and
serves them through a paginated, filterable read API.
"""
