from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from .errors import InvalidConfigError
from .presets import builtin_presets, custom
from .style import CustomStylePreset, RoleConstraints, StylePreset

_LOGGER = logging.getLogger("fmforge.style_engine")


class StyleEngine:
    """Indexed registry of the built-in presets plus one editable custom preset.

    The custom preset always occupies the last index.
    """

    def __init__(self) -> None:
        self._builtins: tuple[StylePreset, ...] = ()
        self._custom = custom()
        self._presets: tuple[StylePreset, ...] = ()
        self._active = 0
        self.reset()

    def reset(self) -> None:
        """Rebuild the catalog and select the first preset."""
        self._builtins = tuple(builtin_presets())
        self._install_custom(custom())
        self._active = 0

    def _install_custom(self, preset: CustomStylePreset) -> None:
        self._custom = preset
        self._presets = (*self._builtins, preset)

    @property
    def preset_count(self) -> int:
        return len(self._presets)

    def presets(self) -> tuple[StylePreset, ...]:
        return self._presets

    def get_preset(self, index: int) -> StylePreset:
        if index < 0 or index >= len(self._presets):
            return self._presets[0]
        return self._presets[index]

    @property
    def active_index(self) -> int:
        return self._active

    @property
    def active_preset(self) -> StylePreset:
        return self.get_preset(self._active)

    def set_active(self, index: int) -> None:
        if 0 <= index < len(self._presets):
            self._active = index
        else:
            _LOGGER.debug("Ignoring out-of-range preset index %d", index)

    def find(self, name: str) -> int | None:
        """Index of the preset whose name matches case-insensitively."""
        wanted = name.strip().lower()
        for index, preset in enumerate(self._presets):
            if preset.name.lower() == wanted:
                return index
        return None

    def role_constraints(self, role: int) -> RoleConstraints:
        return self.active_preset.constraints_for(role)

    @property
    def custom_preset(self) -> CustomStylePreset:
        return self._custom

    def replace_custom_preset(self, data: Mapping[str, Any]) -> CustomStylePreset:
        """Validate ``data`` and install it as the custom preset."""
        try:
            preset = CustomStylePreset.model_validate(dict(data))
        except ValidationError as exc:
            raise InvalidConfigError(f"Invalid custom style preset: {exc}") from exc
        self._install_custom(preset)
        _LOGGER.info("Loaded custom style preset %r", preset.name)
        return preset
