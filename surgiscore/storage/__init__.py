"""
Persistence for SurgiScore records.

A small JSON file store keyed by record id, with a versioned envelope per
record, and the ward registry built on top of it.
"""

from surgiscore.storage.record_store import RecordStore
from surgiscore.storage.ward_registry import WardRegistry
