"""Routing: a fluent Router tree compiled into one immutable Dispatcher.

Routers and routes are mutable while the tree is being declared. The
first ``compile()`` flattens the tree into a trie-backed route table
and freezes it.
"""
