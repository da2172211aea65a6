"""Routing: URI pattern table, O(path-depth) matching, and dispatch.

Literal patterns are indexed by path; placeholder patterns are compiled
into a segment trie as they are added.
"""
