"""Project scaffolding catalog.

Provides:
- Recipes (framework, commands, component sets)
- Design packs and deterministic pack selection
- Style resolution into design tokens
"""

from .design_packs import (
    DESIGN_PACKS,
    DesignPack,
    get_design_pack,
    get_picker_packs,
    select_design_pack,
)
from .recipes import RECIPES, Recipe, get_recipe, select_recipe
from .style_resolver import PackThemeGenerator, ThemeGenerator, resolve_tokens

__all__ = [
    "DESIGN_PACKS",
    "DesignPack",
    "get_design_pack",
    "get_picker_packs",
    "select_design_pack",
    "RECIPES",
    "Recipe",
    "get_recipe",
    "select_recipe",
    "PackThemeGenerator",
    "ThemeGenerator",
    "resolve_tokens",
]
