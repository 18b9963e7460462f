"""
Continuing medical education (CME) content for the unit's trainees.
"""

from surgiscore.training.library import CMELibrary, QuizResult, grade_quiz
