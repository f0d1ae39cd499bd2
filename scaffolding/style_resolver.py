"""Style resolution: design pack -> design tokens.

Color science is delegated to a ``ThemeGenerator``. The bundled
``PackThemeGenerator`` maps pack colors onto tokens directly.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from schemas.pipeline_state import DesignTokens

from .design_packs import DEFAULT_PACK_ID, DesignPack, get_design_pack

logger = logging.getLogger(__name__)


@runtime_checkable
class ThemeGenerator(Protocol):
    """Derives token sets for a design pack."""

    def light_tokens(self, pack: DesignPack) -> DesignTokens:
        ...

    def dark_tokens(self, pack: DesignPack) -> DesignTokens:
        ...


class PackThemeGenerator:
    """Maps pack colors straight onto tokens (no color-space math)."""

    DARK_BACKGROUND = "#0f172a"
    DARK_SURFACE = "#1e293b"
    DARK_FOREGROUND = "#f8fafc"
    DARK_BORDER = "#334155"

    def light_tokens(self, pack: DesignPack) -> DesignTokens:
        c = pack.colors
        return DesignTokens(
            background=c.background,
            foreground=c.foreground,
            primary=c.primary,
            primary_foreground=c.primary_foreground,
            secondary=c.secondary,
            secondary_foreground=c.secondary_foreground,
            muted=c.muted,
            muted_foreground=c.muted_foreground,
            accent=c.accent,
            accent_foreground=c.accent_foreground,
            card=c.background,
            card_foreground=c.foreground,
            popover=c.background,
            popover_foreground=c.foreground,
            border=c.border,
            input=c.border,
            ring=c.primary,
            chart_1=c.primary,
            chart_2=c.secondary,
            chart_3=c.accent,
            sidebar=c.muted,
            sidebar_foreground=c.foreground,
            sidebar_primary=c.primary,
            sidebar_primary_foreground=c.primary_foreground,
            sidebar_accent=c.muted,
            sidebar_accent_foreground=c.foreground,
            sidebar_border=c.border,
            sidebar_ring=c.primary,
            radius=pack.radius,
        )

    def dark_tokens(self, pack: DesignPack) -> DesignTokens:
        if pack.dark:
            return self.light_tokens(pack)
        c = pack.colors
        return self.light_tokens(pack).model_copy(
            update={
                "background": self.DARK_BACKGROUND,
                "foreground": self.DARK_FOREGROUND,
                "card": self.DARK_SURFACE,
                "card_foreground": self.DARK_FOREGROUND,
                "popover": self.DARK_SURFACE,
                "popover_foreground": self.DARK_FOREGROUND,
                "muted": self.DARK_SURFACE,
                "border": self.DARK_BORDER,
                "input": self.DARK_BORDER,
                "sidebar": self.DARK_SURFACE,
                "sidebar_foreground": self.DARK_FOREGROUND,
                "sidebar_accent": self.DARK_SURFACE,
                "sidebar_accent_foreground": self.DARK_FOREGROUND,
                "sidebar_border": self.DARK_BORDER,
                "ring": c.accent,
            }
        )


@dataclass
class ResolvedStyle:
    pack: DesignPack
    light: DesignTokens
    dark: DesignTokens


def resolve_pack(pack_id: str | None) -> DesignPack:
    """Look up a pack, falling back to the default pack for unknown ids."""
    pack = get_design_pack(pack_id) if pack_id else None
    if pack is None:
        if pack_id:
            logger.warning(f"Unknown design pack '{pack_id}', using {DEFAULT_PACK_ID}")
        pack = get_design_pack(DEFAULT_PACK_ID)
    assert pack is not None
    return pack


def resolve_tokens(pack: DesignPack, generator: ThemeGenerator | None = None) -> ResolvedStyle:
    """Derive light and dark tokens concurrently and wait for both.

    The two derivations share no mutable state. Any exception from
    either one propagates to the caller.

    Args:
        pack: Design pack to resolve
        generator: Theme generator (defaults to PackThemeGenerator)

    Returns:
        Both token sets for the pack
    """
    generator = generator or PackThemeGenerator()
    with ThreadPoolExecutor(max_workers=2) as executor:
        light_future = executor.submit(generator.light_tokens, pack)
        dark_future = executor.submit(generator.dark_tokens, pack)
        light = light_future.result()
        dark = dark_future.result()
    return ResolvedStyle(pack=pack, light=light, dark=dark)


def render_theme_css(light: DesignTokens, dark: DesignTokens | None) -> str:
    """Render tokens as a CSS block of custom properties."""
    lines = [":root {"]
    lines += [f"  {name}: {value};" for name, value in light.to_css_vars().items()]
    lines.append("}")
    if dark is not None:
        lines += ["", ".dark {"]
        lines += [f"  {name}: {value};" for name, value in dark.to_css_vars().items()]
        lines.append("}")
    return "\n".join(lines) + "\n"
