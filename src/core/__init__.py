"""Core domain package for tapback.

Core contains pattern building, reaction parsing, target resolution, and
reconciliation logic without any storage or locale-loading code, keeping the
business logic portable.
"""
