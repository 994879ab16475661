"""
Version 1 of the API.

Bundles the book and reader endpoints of the Library API.
"""
