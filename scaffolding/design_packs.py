"""Design pack catalog and deterministic pack selection."""

import hashlib
from dataclasses import dataclass, field


@dataclass(frozen=True)
class PackColors:
    primary: str
    secondary: str
    accent: str
    background: str
    foreground: str
    muted: str
    border: str
    primary_foreground: str = "#ffffff"
    secondary_foreground: str = "#ffffff"
    accent_foreground: str = "#ffffff"
    muted_foreground: str = "#64748b"


@dataclass(frozen=True)
class DesignPack:
    """A named visual style: colors, fonts, corner radius."""

    id: str
    name: str
    vibe: str  # minimal | enterprise | vibrant | warm | neo | glass | gradient
    colors: PackColors
    heading_font: str = "Inter"
    body_font: str = "Inter"
    radius: str = "0.5rem"
    dark: bool = False
    tags: tuple[str, ...] = field(default_factory=tuple)

    def summary(self) -> str:
        return f"{self.name} ({self.vibe}): {self.colors.primary} / {self.heading_font}"


DESIGN_PACKS: list[DesignPack] = [
    DesignPack(
        "minimal-light", "Minimal Light", "minimal",
        PackColors("#0f172a", "#64748b", "#0ea5e9", "#ffffff", "#0f172a", "#f1f5f9", "#e2e8f0"),
    ),
    DesignPack(
        "minimal-dark", "Minimal Dark", "minimal",
        PackColors(
            "#f8fafc", "#94a3b8", "#38bdf8", "#0f172a", "#f8fafc", "#1e293b", "#334155",
            primary_foreground="#0f172a", secondary_foreground="#0f172a",
            accent_foreground="#0f172a", muted_foreground="#94a3b8",
        ),
        dark=True,
    ),
    DesignPack(
        "enterprise-blue", "Enterprise Blue", "enterprise",
        PackColors("#1e40af", "#3b82f6", "#0284c7", "#ffffff", "#1e293b", "#f8fafc", "#e2e8f0"),
        heading_font="IBM Plex Sans", body_font="IBM Plex Sans", radius="0.25rem",
    ),
    DesignPack(
        "enterprise-slate", "Enterprise Slate", "enterprise",
        PackColors("#334155", "#64748b", "#0d9488", "#ffffff", "#1e293b", "#f8fafc", "#cbd5e1"),
        heading_font="IBM Plex Sans", body_font="IBM Plex Sans", radius="0.25rem",
    ),
    DesignPack(
        "vibrant-pop", "Vibrant Pop", "vibrant",
        PackColors(
            "#7c3aed", "#ec4899", "#f59e0b", "#fefce8", "#1c1917", "#fef3c7", "#fde047",
            accent_foreground="#1c1917", muted_foreground="#78716c",
        ),
        heading_font="Poppins", body_font="Poppins", radius="1rem",
    ),
    DesignPack(
        "vibrant-neon", "Vibrant Neon", "vibrant",
        PackColors(
            "#a855f7", "#22d3ee", "#f472b6", "#18181b", "#fafafa", "#27272a", "#3f3f46",
            primary_foreground="#000000", secondary_foreground="#000000",
            accent_foreground="#000000", muted_foreground="#a1a1aa",
        ),
        heading_font="Space Grotesk", body_font="Space Grotesk", radius="1rem", dark=True,
    ),
    DesignPack(
        "warm-sand", "Warm Sand", "warm",
        PackColors(
            "#92400e", "#b45309", "#dc2626", "#fffbeb", "#451a03", "#fef3c7", "#fde68a",
            muted_foreground="#a16207",
        ),
        heading_font="Playfair Display", body_font="Source Sans Pro",
    ),
    DesignPack(
        "warm-olive", "Warm Olive", "warm",
        PackColors(
            "#3f6212", "#65a30d", "#ca8a04", "#fefce8", "#1a2e05", "#ecfccb", "#bef264",
            accent_foreground="#000000", muted_foreground="#4d7c0f",
        ),
        heading_font="Merriweather", body_font="Source Sans Pro",
    ),
    DesignPack(
        "neo-brutalist", "Neo Brutalist", "neo",
        PackColors(
            "#000000", "#000000", "#facc15", "#ffffff", "#000000", "#f5f5f5", "#000000",
            accent_foreground="#000000", muted_foreground="#525252",
        ),
        heading_font="DM Sans", body_font="DM Sans", radius="0rem",
    ),
    DesignPack(
        "glassmorphism", "Glassmorphism", "glass",
        PackColors(
            "rgba(99, 102, 241, 0.9)", "rgba(139, 92, 246, 0.8)", "rgba(236, 72, 153, 0.9)",
            "#f8fafc", "#1e293b", "rgba(255, 255, 255, 0.4)", "rgba(255, 255, 255, 0.3)",
        ),
        radius="1rem",
    ),
    DesignPack(
        "gradient-sunset", "Gradient Sunset", "gradient",
        PackColors(
            "#f97316", "#ec4899", "#a855f7", "#fffbeb", "#1c1917", "#fff7ed", "#fed7aa",
            muted_foreground="#78716c",
        ),
        heading_font="Montserrat",
    ),
    DesignPack(
        "gradient-ocean", "Gradient Ocean", "gradient",
        PackColors(
            "#0284c7", "#06b6d4", "#8b5cf6", "#f0f9ff", "#0c4a6e", "#e0f2fe", "#bae6fd",
            secondary_foreground="#000000", muted_foreground="#0369a1",
        ),
        heading_font="Montserrat",
    ),
]

_PACKS_BY_ID = {p.id: p for p in DESIGN_PACKS}

PICKER_PACK_IDS = [
    "minimal-light",
    "minimal-dark",
    "enterprise-blue",
    "vibrant-neon",
    "gradient-ocean",
    "neo-brutalist",
]

DEFAULT_PACK_ID = "minimal-light"

ENTERPRISE_KEYWORDS = [
    "business", "b2b", "enterprise", "admin", "dashboard",
    "saas", "crm", "erp", "internal", "corporate",
    "management", "analytics", "reporting", "portal",
]

MOBILE_KEYWORDS = [
    "mobile", "app", "ios", "android", "expo", "react native",
    "phone", "tablet", "native",
]


def get_design_pack(pack_id: str) -> DesignPack | None:
    return _PACKS_BY_ID.get(pack_id)


def is_valid_pack_id(pack_id: str) -> bool:
    return pack_id in _PACKS_BY_ID


def get_picker_packs() -> list[DesignPack]:
    """Packs offered by the style picker, one per major vibe."""
    return [_PACKS_BY_ID[pid] for pid in PICKER_PACK_IDS]


def detect_domain_hint(user_prompt: str) -> str | None:
    """Return 'enterprise', 'mobile' or None from keywords in the request."""
    prompt = user_prompt.lower()
    if any(kw in prompt for kw in ENTERPRISE_KEYWORDS):
        return "enterprise"
    if any(kw in prompt for kw in MOBILE_KEYWORDS):
        return "mobile"
    return None


def filter_packs(recipe_id: str, domain_hint: str | None) -> list[DesignPack]:
    """Restrict the catalog to packs that suit the recipe and domain."""
    if recipe_id == "expo" or domain_hint == "mobile":
        return [p for p in DESIGN_PACKS if p.vibe in ("vibrant", "warm", "minimal", "gradient")]
    if domain_hint == "enterprise":
        return [p for p in DESIGN_PACKS if p.vibe in ("enterprise", "minimal")]
    return list(DESIGN_PACKS)


def compute_selection_seed(*parts: str) -> str:
    """sha256 of the stable inputs, truncated to 8 hex chars."""
    seed_input = "|".join([*parts, "v1"])
    return hashlib.sha256(seed_input.encode("utf-8")).hexdigest()[:8]


def select_design_pack(
    user_prompt: str,
    recipe_id: str,
    seed_key: str,
    override_pack_id: str | None = None,
) -> tuple[DesignPack, str]:
    """Pick a design pack deterministically.

    Args:
        user_prompt: Original request (for the domain hint)
        recipe_id: Selected recipe
        seed_key: Stable key (target directory or run id) feeding the seed
        override_pack_id: Explicit user choice, wins when valid

    Returns:
        (pack, reason) where reason is override | seeded | fallback
    """
    if override_pack_id:
        pack = get_design_pack(override_pack_id)
        if pack:
            return pack, "override"

    candidates = filter_packs(recipe_id, detect_domain_hint(user_prompt))
    if not candidates:
        return _PACKS_BY_ID[DEFAULT_PACK_ID], "fallback"

    seed = compute_selection_seed(seed_key, recipe_id)
    return candidates[int(seed, 16) % len(candidates)], "seeded"
