"""Dataview module — technical indicator views over daily records."""

from __future__ import annotations
