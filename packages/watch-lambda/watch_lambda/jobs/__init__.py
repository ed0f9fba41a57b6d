"""
Standalone job implementations for the watchability pipeline.

Each job is executable as a script or importable for serverless handlers and the
local scheduler.
"""
