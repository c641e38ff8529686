"""Loader utilities for SkelForm exports."""

from .armature_loader import AtlasTexture, armature_from_dict, load

__all__ = ['AtlasTexture', 'armature_from_dict', 'load']
