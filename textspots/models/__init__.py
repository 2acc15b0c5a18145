"""Spot models."""

from .spot import DEFAULT_MASK_OPACITY, SavedSpotSnapshot, Spot, SpotType

__all__ = ["SpotType", "Spot", "SavedSpotSnapshot", "DEFAULT_MASK_OPACITY"]
