"""
Core clinical logic for SurgiScore.

Contains the data models, the scoring primitives and the decision/plan
generators built on top of them.
"""
