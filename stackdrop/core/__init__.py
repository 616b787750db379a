"""Core gameplay primitives (block stack, run clock, session engine, events).

Kept free of FastAPI and Redis concerns so it can be driven by API routes, a local
frame loop, and tests alike.
"""
