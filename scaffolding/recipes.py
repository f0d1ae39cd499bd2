"""Project recipes.

Each recipe defines:
- Create / dev / build commands
- Framework version pin
- UI component set installed by the design system stage
- Estimates shown on the proposal card
"""

import re
from dataclasses import dataclass, field


@dataclass
class Recipe:
    """Definition of a project recipe."""

    id: str
    display_name: str
    framework_version: str
    create_command: str  # {app_name} is replaced at runtime
    dev_command: str
    build_command: str
    key_files: list[str] = field(default_factory=list)
    components: list[str] = field(default_factory=list)
    estimated_files: int = 0
    estimated_dirs: int = 0

    def render_create_command(self, app_name: str) -> str:
        return self.create_command.replace("{app_name}", app_name)


# =============================================================================
# Recipes
# =============================================================================

NEXTJS_RECIPE = Recipe(
    id="nextjs_app_router",
    display_name="Next.js",
    framework_version="15.0.0",
    create_command=(
        "npx --yes create-next-app@latest {app_name} --typescript --tailwind --eslint "
        '--app --src-dir --turbopack --use-npm --import-alias "@/*"'
    ),
    dev_command="npm run dev",
    build_command="npm run build",
    key_files=["src/app/page.tsx", "src/app/layout.tsx", "src/app/globals.css"],
    components=[
        "button", "card", "input", "label", "separator",
        "sidebar", "sheet", "tooltip", "avatar", "dropdown-menu",
        "badge", "dialog", "table", "tabs", "select", "textarea",
        "checkbox", "skeleton", "scroll-area",
    ],
    estimated_files=24,
    estimated_dirs=8,
)

VITE_RECIPE = Recipe(
    id="vite_react",
    display_name="Vite + React",
    framework_version="6.0.0",
    create_command="npm create vite@latest {app_name} -- --template react-ts",
    dev_command="npm run dev",
    build_command="npm run build",
    key_files=["src/App.tsx", "src/main.tsx", "index.html"],
    components=[
        "button", "card", "input", "label", "separator",
        "tooltip", "badge", "dialog", "tabs", "select",
    ],
    estimated_files=18,
    estimated_dirs=6,
)

EXPO_RECIPE = Recipe(
    id="expo",
    display_name="Expo",
    framework_version="52.0.0",
    create_command="npx --yes create-expo-app {app_name} --template blank-typescript",
    dev_command="npx expo start",
    build_command="npx expo export",
    key_files=["App.tsx", "app/(tabs)/index.tsx", "app/_layout.tsx"],
    components=[],  # no shadcn on React Native
    estimated_files=22,
    estimated_dirs=7,
)

RECIPES: dict[str, Recipe] = {
    r.id: r for r in (NEXTJS_RECIPE, VITE_RECIPE, EXPO_RECIPE)
}

DEFAULT_RECIPE_ID = NEXTJS_RECIPE.id


def get_recipe(recipe_id: str) -> Recipe:
    """Get a recipe by id.

    Raises:
        KeyError: If the recipe is unknown
    """
    if recipe_id not in RECIPES:
        raise KeyError(f"Unknown recipe: {recipe_id}. Available: {list(RECIPES)}")
    return RECIPES[recipe_id]


# =============================================================================
# Selection
# =============================================================================

NEXTJS_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"\bnext\.?js\b",
        r"\bapp\s*router\b",
        r"\bserver\s*side\s*render",
        r"\bssr\b",
        r"\bserver\s*components?\b",
        r"\breact\s*server\b",
    )
]

VITE_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"\bvite\b",
        r"\bspa\b",
        r"\bsingle\s*page\s*app",
        r"\bno\s*ssr\b",
        r"\bclient[\s-]*side\s*only\b",
        r"\bstatic\s*site\b",
    )
]

MOBILE_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"\bexpo\b",
        r"\breact[\s-]*native\b",
        r"\bmobile\s*app\b",
        r"\bios\b",
        r"\bandroid\b",
        r"\bcross[\s-]*platform\b",
        r"\bnative\s*app\b",
        r"\bphone\s*app\b",
    )
]


@dataclass
class RecipeSelection:
    recipe_id: str
    reason: str  # explicit_user | default_mobile | default_web
    confidence: float


def _matches_any(prompt: str, patterns: list[re.Pattern[str]]) -> bool:
    return any(p.search(prompt) for p in patterns)


def select_recipe(user_prompt: str) -> RecipeSelection:
    """Pick a recipe from the user's request (deterministic, no LLM).

    Rules, in order: explicit Next.js mention, explicit Vite/SPA mention,
    mobile indicators, then Next.js as the web default.
    """
    if _matches_any(user_prompt, NEXTJS_PATTERNS):
        return RecipeSelection(NEXTJS_RECIPE.id, "explicit_user", 0.95)
    if _matches_any(user_prompt, VITE_PATTERNS):
        return RecipeSelection(VITE_RECIPE.id, "explicit_user", 0.95)
    if _matches_any(user_prompt, MOBILE_PATTERNS):
        reason = "explicit_user" if re.search(r"\bexpo\b", user_prompt, re.IGNORECASE) else "default_mobile"
        return RecipeSelection(EXPO_RECIPE.id, reason, 0.9)
    return RecipeSelection(NEXTJS_RECIPE.id, "default_web", 0.7)


_FRAMEWORK_HINTS = [
    (("nextjs", "next.js", "next app"), "Next.js application"),
    (("vite",), "Vite application"),
    (("expo",), "Expo (React Native) application"),
    (("react",), "React application"),
    (("vue",), "Vue.js application"),
    (("angular",), "Angular application"),
    (("express",), "Express.js backend"),
    (("node",), "Node.js project"),
    (("typescript",), "TypeScript project"),
]


def detect_framework(user_prompt: str) -> str:
    """Describe the framework the request mentions, e.g. 'Next.js application'."""
    prompt = user_prompt.lower()
    for needles, label in _FRAMEWORK_HINTS:
        if any(n in prompt for n in needles):
            return label
    return "project"
