"""Exam engine HTTP API."""
