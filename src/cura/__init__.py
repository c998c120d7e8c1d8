"""cura — Normalize FHIR JSON bundles into query-ready patient records.

Bundles are scanned from a data folder, mapped resource by resource, and served
from a lazily loaded, thread-safe patient store.
"""

__version__ = "0.3.0"
