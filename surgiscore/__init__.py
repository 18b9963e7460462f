"""
SurgiScore

Clinical scoring, recommendation and documentation tools for a surgical unit:
WHO discharge readiness, diabetic foot limb salvage assessment and burn
severity / fluid resuscitation planning.
"""

__version__ = "0.1.0"
