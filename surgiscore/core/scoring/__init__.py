"""
Clinical Scoring Systems

This package provides the deterministic scoring primitives used on the
surgical unit: WHO discharge readiness, diabetic foot component scores and
burn severity / resuscitation calculators.
"""
