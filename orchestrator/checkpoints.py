"""Scaffold approval checkpoint payloads.

Builds the proposal, decision and style-picker payloads emitted by the
flow coordinator. Pure functions; nothing here touches the event log.
"""

from datetime import datetime, timezone
from typing import Any

from schemas.flow_state import DecisionOption, UserAction
from scaffolding.design_packs import DesignPack, get_picker_packs, select_design_pack
from scaffolding.recipes import detect_framework, get_recipe, select_recipe

DECISION_TYPE = "scaffold_approval"
CHANGE_STYLE_ACTION = "change_style"


def build_decision_options() -> list[DecisionOption]:
    """The three options offered with every scaffold decision."""
    return [
        DecisionOption(
            action=UserAction.PROCEED.value,
            label="Proceed",
            description="Continue with scaffold setup",
            primary=True,
        ),
        DecisionOption(
            action=UserAction.CANCEL.value,
            label="Cancel",
            description="Cancel scaffold and return to chat",
        ),
        DecisionOption(
            action=CHANGE_STYLE_ACTION,
            label="Change Style",
            description="Choose a different design style",
        ),
    ]


def build_proposal_payload(
    flow_id: str,
    user_prompt: str,
    target_directory: str | None,
    seed_key: str,
    override_pack_id: str | None = None,
) -> dict[str, Any]:
    """Build the proposal for a scaffold request.

    Args:
        flow_id: Scaffold flow id
        user_prompt: Original request
        target_directory: Where the project will be created
        seed_key: Stable key for deterministic pack selection
        override_pack_id: Pack chosen in the style picker

    Returns:
        Payload for a ``proposal_created`` event
    """
    selection = select_recipe(user_prompt)
    recipe = get_recipe(selection.recipe_id)
    pack, pack_reason = select_design_pack(
        user_prompt,
        recipe.id,
        seed_key=seed_key,
        override_pack_id=override_pack_id,
    )
    framework = detect_framework(user_prompt)

    return {
        "scaffold_id": flow_id,
        "summary": f"Create a new {framework} using {recipe.display_name} with the {pack.name} design.",
        "detected_framework": framework,
        "recipe_id": recipe.id,
        "recipe_name": recipe.display_name,
        "recipe_reason": selection.reason,
        "design_pack_id": pack.id,
        "design_pack_name": pack.name,
        "design_pack_reason": pack_reason,
        "design_pack_overridden": pack_reason == "override",
        "files_count": recipe.estimated_files,
        "directories_count": recipe.estimated_dirs,
        "target_directory": target_directory,
        "created_at_iso": datetime.now(timezone.utc).isoformat(),
    }


def build_decision_payload(
    flow_id: str,
    user_prompt: str,
    proposal: dict[str, Any],
) -> dict[str, Any]:
    """Build the payload for a ``decision_requested`` event."""
    return {
        "scaffold_id": flow_id,
        "decision_type": DECISION_TYPE,
        "title": "Create new project",
        "summary": proposal.get("summary", ""),
        "recipe_id": proposal.get("recipe_id"),
        "design_pack_id": proposal.get("design_pack_id"),
        "options": [o.model_dump() for o in build_decision_options()],
        "context": {
            "flow": "scaffold",
            "scaffold_id": flow_id,
            "user_prompt": user_prompt,
        },
    }


def _pack_card(pack: DesignPack) -> dict[str, Any]:
    return {
        "id": pack.id,
        "name": pack.name,
        "vibe": pack.vibe,
        "primary": pack.colors.primary,
        "background": pack.colors.background,
        "font": pack.heading_font,
    }


def build_style_picker_payload(flow_id: str, current_pack_id: str | None) -> dict[str, Any]:
    """Build the payload for a ``style_selection_requested`` event."""
    return {
        "scaffold_id": flow_id,
        "current_pack_id": current_pack_id,
        "available_packs": [_pack_card(p) for p in get_picker_packs()],
    }
