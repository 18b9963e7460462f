"""
Decision support components for SurgiScore.

This package contains the rule-based generators that turn clinical scores
into recommendations and plans: limb salvage, burn management and discharge
planning.
"""

from surgiscore.core.decision.limb_salvage import calculate_total_score, generate_recommendations
