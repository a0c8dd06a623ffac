"""
Visual search - image similarity relay.

Accepts an uploaded image, obtains its embedding from the embedding service
and returns the most similar items of a precomputed collection.
"""

__version__ = "0.1.0"
