"""Flat JSON documents for operator settings.

Keyboard shortcuts, team defaults and team presets each live in their own
file under DATA_DIR. Nothing here is allowed to take the server down: read
failures come back as ``None``/empty and write failures as ``False``, both
logged.
"""
import json
import logging
import os
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

from scoreboard.models import IDENTITY_FIELDS
from scoreboard.services.match.timefmt import now_ms

TEAM_KEYS = ('homeTeam', 'awayTeam')


class JsonDocument:
    """One JSON file with atomic writes."""

    def __init__(self, path: Path, logger: Optional[logging.Logger] = None):
        self.path = Path(path)
        self.logger = logger or logging.getLogger(__name__)
        self._lock = threading.Lock()

    def load(self) -> Any:
        if not self.path.exists():
            return None
        try:
            with self._lock:
                with open(self.path, 'r', encoding='utf-8') as f:
                    return json.load(f)
        except (OSError, ValueError) as e:
            self.logger.error(f"[storage-error] failed to read {self.path}: {e}")
            return None

    def save(self, data: Any) -> bool:
        with self._lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                temp_file = self.path.with_suffix('.tmp')
                with open(temp_file, 'w', encoding='utf-8') as f:
                    json.dump(data, f, indent=2)
                os.replace(temp_file, self.path)
                return True
            except (OSError, TypeError, ValueError) as e:
                self.logger.error(f"[storage-error] failed to write {self.path}: {e}")
                return False


def pick_identity(team: Any) -> Dict[str, str]:
    """Identity fields of a team dict, ignoring anything else it carries."""
    if not isinstance(team, dict):
        return {}
    return {f: team[f] for f in IDENTITY_FIELDS if isinstance(team.get(f), str)}


class SettingsStorage:
    def __init__(self, data_dir, shortcuts_file='shortcuts.json',
                 team_defaults_file='team-defaults.json',
                 team_presets_file='team-presets.json',
                 logger: Optional[logging.Logger] = None):
        self.data_dir = Path(data_dir)
        self.logger = logger or logging.getLogger(__name__)
        self.shortcuts = JsonDocument(self.data_dir / shortcuts_file, self.logger)
        self.team_defaults = JsonDocument(self.data_dir / team_defaults_file, self.logger)
        self.team_presets = JsonDocument(self.data_dir / team_presets_file, self.logger)

    @classmethod
    def from_config(cls, config, logger=None) -> 'SettingsStorage':
        return cls(
            config['DATA_DIR'],
            shortcuts_file=config.get('SHORTCUTS_FILE', 'shortcuts.json'),
            team_defaults_file=config.get('TEAM_DEFAULTS_FILE', 'team-defaults.json'),
            team_presets_file=config.get('TEAM_PRESETS_FILE', 'team-presets.json'),
            logger=logger,
        )

    # ---- keyboard shortcuts (opaque, replaced wholesale) ----
    def load_shortcuts(self) -> Optional[List[Any]]:
        data = self.shortcuts.load()
        return data if isinstance(data, list) else None

    def save_shortcuts(self, shortcuts: List[Any]) -> bool:
        return self.shortcuts.save(shortcuts)

    # ---- team defaults (identity merged per team) ----
    def load_team_defaults(self) -> Optional[Dict[str, Dict[str, str]]]:
        data = self.team_defaults.load()
        if not isinstance(data, dict):
            return None
        return {k: pick_identity(data.get(k)) for k in TEAM_KEYS}

    def save_team_defaults(self, updates: Dict[str, Any]) -> bool:
        current = self.load_team_defaults() or {k: {} for k in TEAM_KEYS}
        for k in TEAM_KEYS:
            if k in updates:
                current[k].update(pick_identity(updates[k]))
        return self.team_defaults.save(current)

    # ---- named presets (upsert by case-insensitive name) ----
    def load_team_presets(self) -> List[Dict[str, Any]]:
        data = self.team_presets.load()
        if not isinstance(data, list):
            return []
        presets = [p for p in data if isinstance(p, dict) and isinstance(p.get('name'), str)]
        return sorted(presets, key=lambda p: p['name'].lower())

    def find_team_preset(self, name: str) -> Optional[Dict[str, Any]]:
        key = name.strip().lower()
        for p in self.load_team_presets():
            if p['name'].lower() == key:
                return p
        return None

    def upsert_team_preset(self, name: str, home: Any, away: Any) -> Optional[List[Dict[str, Any]]]:
        """Insert or replace a preset; returns the new list, or None on write failure."""
        name = name.strip()
        preset = {
            'name': name,
            'homeTeam': pick_identity(home),
            'awayTeam': pick_identity(away),
            'updatedAt': now_ms(),
        }
        presets = [p for p in self.load_team_presets() if p['name'].lower() != name.lower()]
        presets.append(preset)
        presets.sort(key=lambda p: p['name'].lower())
        if not self.team_presets.save(presets):
            return None
        return presets

    def delete_team_preset(self, name: str) -> Optional[List[Dict[str, Any]]]:
        key = name.strip().lower()
        presets = [p for p in self.load_team_presets() if p['name'].lower() != key]
        if not self.team_presets.save(presets):
            return None
        return presets

    def clear_team_presets(self) -> bool:
        return self.team_presets.save([])
