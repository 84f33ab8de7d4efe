"""Snapshot storage layer.

This package persists per-version copies of headers, libraries, and
package metadata, and locates the metadata of the live installation.
"""
