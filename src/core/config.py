"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class LocaleConfig:
    """Locale discovery settings for the pattern catalog."""

    baseline: str = "en"
    # None means "every locale the strings provider knows about".
    candidates: Optional[Tuple[str, ...]] = None
