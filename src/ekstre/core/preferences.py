"""Parser preferences for ekstre.

Provides data-driven configuration for the statement parsers with sensible
defaults. A ``preferences.json`` file in the config directory overrides any
subset of the defaults.
"""

import copy
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Any

logger = logging.getLogger(__name__)

CONFIG_DIR_ENV = "EKSTRE_CONFIG_DIR"
PREFERENCES_FILE = "preferences.json"

# Default preferences (used when nothing is configured)
DEFAULT_PREFERENCES = {
    "$schema": "ekstre_preferences_v1",
    "version": "1.0",

    "parsers": {
        "header_scan_rows": 15,
        "min_header_matches": 3,
        "default_bank_type": "auto",
        "iban_scan_rows": {
            "ziraat": 15,
            "enpara": 10
        },
        "extra_column_keywords": {}
    }
}


@dataclass
class ParserPreferences:
    """Configuration shared by the bank statement parsers."""
    header_scan_rows: int = 15
    min_header_matches: int = 3
    default_bank_type: str = "auto"
    iban_scan_rows: Dict[str, int] = field(default_factory=lambda: {"ziraat": 15, "enpara": 10})
    extra_column_keywords: Dict[str, List[str]] = field(default_factory=dict)

    def iban_rows_for(self, bank_type: str, default: int = 15) -> int:
        """Number of leading rows searched for the IBAN of a bank."""
        return self.iban_scan_rows.get(bank_type, default)

    def keywords_for(self, role: str) -> List[str]:
        """Additional header keywords configured for a column role."""
        return [kw.lower() for kw in self.extra_column_keywords.get(role, [])]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParserPreferences":
        """Create preferences from a full preferences dictionary."""
        parsers = data.get("parsers", {})
        defaults = DEFAULT_PREFERENCES["parsers"]
        return cls(
            header_scan_rows=int(parsers.get("header_scan_rows", defaults["header_scan_rows"])),
            min_header_matches=int(parsers.get("min_header_matches", defaults["min_header_matches"])),
            default_bank_type=parsers.get("default_bank_type", defaults["default_bank_type"]),
            iban_scan_rows=dict(parsers.get("iban_scan_rows", defaults["iban_scan_rows"])),
            extra_column_keywords={
                role: list(words)
                for role, words in parsers.get("extra_column_keywords", {}).items()
            },
        )

    @classmethod
    def load(cls, config_dir: Optional[Path] = None) -> "ParserPreferences":
        """
        Load preferences with fallback to defaults.

        Args:
            config_dir: Directory holding preferences.json. When omitted the
                EKSTRE_CONFIG_DIR environment variable is consulted.

        Returns:
            ParserPreferences instance
        """
        data = copy.deepcopy(DEFAULT_PREFERENCES)

        if config_dir is None and os.environ.get(CONFIG_DIR_ENV):
            config_dir = Path(os.environ[CONFIG_DIR_ENV])

        if config_dir is not None:
            prefs_file = Path(config_dir) / PREFERENCES_FILE
            if prefs_file.exists():
                try:
                    with open(prefs_file, encoding='utf-8') as f:
                        user_data = json.load(f)
                    data = _deep_merge(data, user_data)
                    logger.debug(f"Loaded preferences from {prefs_file}")
                except (OSError, ValueError) as e:
                    logger.warning(f"Failed to load preferences from {prefs_file}: {e}")

        return cls.from_dict(data)


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """Deep merge two dictionaries, override takes precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result
