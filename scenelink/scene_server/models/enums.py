"""Command type tags sent to the browser."""

from __future__ import annotations

from enum import StrEnum


class CommandType(StrEnum):
    """Scene-mutating commands (server -> browser, fire-and-forget)."""

    # Model
    CHANGE_COLOR = "changeColor"
    CHANGE_SIZE = "changeSize"
    SCALE_MODEL = "scaleModel"
    CHANGE_BACKGROUND_COLOR = "changeBackgroundColor"

    # Key light
    SET_KEY_LIGHT_INTENSITY = "setKeyLightIntensity"
    SET_KEY_LIGHT_COLOR = "setKeyLightColor"
    SWING_KEY_LIGHT_UP = "swingKeyLightUp"
    SWING_KEY_LIGHT_DOWN = "swingKeyLightDown"
    SWING_KEY_LIGHT_LEFT = "swingKeyLightLeft"
    SWING_KEY_LIGHT_RIGHT = "swingKeyLightRight"
    WALK_KEY_LIGHT_IN = "walkKeyLightIn"
    WALK_KEY_LIGHT_OUT = "walkKeyLightOut"

    # Fill light
    SET_FILL_LIGHT_INTENSITY = "setFillLightIntensity"
    SET_FILL_LIGHT_COLOR = "setFillLightColor"
    SWING_FILL_LIGHT_UP = "swingFillLightUp"
    SWING_FILL_LIGHT_DOWN = "swingFillLightDown"
    SWING_FILL_LIGHT_LEFT = "swingFillLightLeft"
    SWING_FILL_LIGHT_RIGHT = "swingFillLightRight"
    WALK_FILL_LIGHT_IN = "walkFillLightIn"
    WALK_FILL_LIGHT_OUT = "walkFillLightOut"
