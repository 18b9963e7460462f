"""
Display lookups for clinical enums.

Maps closed enums to the labels, colours and descriptions shown in reports
and on the command line.
"""

from typing import Dict

from surgiscore.core.models import AnatomicalRegion, BurnDepth, RecommendedIntervention, RiskCategory

RISK_CATEGORY_DISPLAY: Dict[RiskCategory, Dict[str, str]] = {
    RiskCategory.LOW_RISK_LIMB_SALVAGE_LIKELY: {
        "label": "Low Risk - Limb Salvage Likely", "color": "green", "icon": "✅",
    },
    RiskCategory.MODERATE_RISK_LIMB_SALVAGE_POSSIBLE: {
        "label": "Moderate Risk - Limb Salvage Possible", "color": "yellow", "icon": "⚠️",
    },
    RiskCategory.HIGH_RISK_CONSIDER_AMPUTATION: {
        "label": "High Risk - Consider Amputation", "color": "dark_orange", "icon": "🔶",
    },
    RiskCategory.CRITICAL_AMPUTATION_RECOMMENDED: {
        "label": "Critical - Amputation Recommended", "color": "red", "icon": "🚨",
    },
}

INTERVENTION_DISPLAY: Dict[RecommendedIntervention, Dict[str, str]] = {
    RecommendedIntervention.CONSERVATIVE_MANAGEMENT: {
        "label": "Conservative Management",
        "description": "Wound care, offloading, antibiotics, and close monitoring",
    },
    RecommendedIntervention.WOUND_CARE_DEBRIDEMENT: {
        "label": "Wound Care & Debridement",
        "description": "Aggressive wound care with serial debridement",
    },
    RecommendedIntervention.REVASCULARIZATION_FIRST: {
        "label": "Revascularization First",
        "description": "Prioritize arterial revascularization before definitive wound management",
    },
    RecommendedIntervention.RAY_AMPUTATION: {
        "label": "Ray Amputation",
        "description": "Amputation of individual toe(s) with metatarsal head",
    },
    RecommendedIntervention.TRANSMETATARSAL_AMPUTATION: {
        "label": "Transmetatarsal Amputation (TMA)",
        "description": "Amputation through the metatarsal bones, preserving the heel",
    },
    RecommendedIntervention.BELOW_KNEE_AMPUTATION: {
        "label": "Below-Knee Amputation (BKA)",
        "description": "Amputation below the knee joint, preserving knee function",
    },
    RecommendedIntervention.ABOVE_KNEE_AMPUTATION: {
        "label": "Above-Knee Amputation (AKA)",
        "description": "Amputation above the knee joint",
    },
    RecommendedIntervention.PALLIATIVE_CARE: {
        "label": "Palliative Care",
        "description": "Comfort-focused care for patients not candidates for intervention",
    },
}

DEPTH_INFO: Dict[BurnDepth, Dict[str, str]] = {
    BurnDepth.SUPERFICIAL: {
        "name": "Superficial (1st Degree)",
        "color": "pink",
        "description": "Epidermis only. Red, dry, painful. Heals in 3-5 days without scarring.",
    },
    BurnDepth.SUPERFICIAL_PARTIAL: {
        "name": "Superficial Partial (2nd Degree)",
        "color": "red",
        "description": "Epidermis + superficial dermis. Blisters, moist, very painful. Heals in 1-2 weeks.",
    },
    BurnDepth.DEEP_PARTIAL: {
        "name": "Deep Partial (2nd Degree)",
        "color": "yellow",
        "description": "Into deep dermis. May have blisters, less painful. Heals in 2-4 weeks, may scar.",
    },
    BurnDepth.FULL_THICKNESS: {
        "name": "Full Thickness (3rd Degree)",
        "color": "brown",
        "description": "Entire dermis destroyed. Waxy, leathery, painless. Requires grafting.",
    },
}

# Regions whose display name is not derived from the enum value
_REGION_NAME_OVERRIDES = {
    AnatomicalRegion.GENITALIA: "Genitalia/Perineum",
}


def _region_name(region: AnatomicalRegion) -> str:
    # right_leg_anterior -> Right Lower Leg (Anterior)
    parts = region.value.split("_")
    side = None
    if parts[-1] in ("anterior", "posterior"):
        side = parts.pop().capitalize()
    words = [p.capitalize() for p in parts]
    if words[-1] == "Leg":
        words.insert(-1, "Lower")
    name = " ".join(words)
    return f"{name} ({side})" if side else name


REGION_DISPLAY_NAMES: Dict[AnatomicalRegion, str] = {
    region: _REGION_NAME_OVERRIDES.get(region) or _region_name(region) for region in AnatomicalRegion
}


def get_risk_category_display(category: RiskCategory) -> Dict[str, str]:
    """Label, colour and icon for a limb salvage risk category."""
    return RISK_CATEGORY_DISPLAY[RiskCategory(category)]


def get_intervention_display(intervention: RecommendedIntervention) -> Dict[str, str]:
    """Label and description for a recommended intervention."""
    return INTERVENTION_DISPLAY[RecommendedIntervention(intervention)]


def get_depth_info(depth: BurnDepth) -> Dict[str, str]:
    return DEPTH_INFO[BurnDepth(depth)]


def get_region_display_name(region: AnatomicalRegion) -> str:
    return REGION_DISPLAY_NAMES[AnatomicalRegion(region)]
