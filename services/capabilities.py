"""Feature availability advertised to the chat client UI."""

from __future__ import annotations

from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from config import StorageSettings
from services.file_types import FILE_TYPE_CONFIG

FEATURE_NOT_AVAILABLE = "Feature not available"

TEXT_LENGTH_LIMIT = 1000


class Capability(BaseModel):
    """State of one UI element: enabled flag, optional limits and tooltip."""

    model_config = ConfigDict(frozen=True)

    available: bool
    tooltip: str = ""
    limit: Optional[int] = None
    types: Optional[Tuple[str, ...]] = None

    def to_document(self) -> Dict[str, object]:
        """Serialize with the key names the client reads."""
        document: Dict[str, object] = {"availableState": "true" if self.available else "false"}
        if self.limit is not None:
            document["limit"] = self.limit
        if self.types is not None:
            document["types"] = list(self.types)
        document["hasTooltip"] = bool(self.tooltip)
        document["tooltip"] = self.tooltip
        return document


def _unavailable() -> Capability:
    return Capability(available=False, tooltip=FEATURE_NOT_AVAILABLE)


def build_capabilities(settings: StorageSettings) -> Dict[str, Dict[str, Capability]]:
    """Capabilities grouped by UI area; attachment limits follow the storage settings."""
    return {
        "messaging": {
            "sendText": Capability(available=True, limit=TEXT_LENGTH_LIMIT),
            "sendAttachments": Capability(
                available=True,
                limit=settings.max_files_per_request,
                types=tuple(f"{group.prefix}*" for group in FILE_TYPE_CONFIG),
            ),
        },
        "search": {
            "searchMessages": _unavailable(),
        },
        "ui": {
            "buttonHelp": Capability(available=True, tooltip="Help"),
            "buttonFavorites": _unavailable(),
            "buttonAttachments": _unavailable(),
            "buttonSettings": Capability(available=True),
        },
    }


def capabilities_document(settings: StorageSettings) -> Dict[str, Dict[str, Dict[str, object]]]:
    return {
        area: {name: capability.to_document() for name, capability in features.items()}
        for area, features in build_capabilities(settings).items()
    }
