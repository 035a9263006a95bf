"""
Schemas module - request bodies accepted by the API.

Responses are plain dict envelopes built in the route handlers.
"""
