"""Crawler module — ingestion of daily records from external providers."""

from __future__ import annotations
