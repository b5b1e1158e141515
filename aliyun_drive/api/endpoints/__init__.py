"""Typed wrappers around the Aliyun Drive REST endpoints."""
