"""Common module — settings, exceptions, logging, schemas and database."""

from __future__ import annotations
