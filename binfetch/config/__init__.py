"""Configuration for binfetch."""

from .parser import Options, Target, load_options, options_from_dict

__all__ = ["Options", "Target", "load_options", "options_from_dict"]
