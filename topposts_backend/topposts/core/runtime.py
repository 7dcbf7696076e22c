from __future__ import annotations

from typing import Any

# Holds runtime singletons created in the app lifespan, to avoid circular imports.
settings: Any | None = None
cache_client: Any | None = None
resource_cache: Any | None = None
data_source: Any | None = None
