"""
Report generation for SurgiScore.

Turns computed scores, recommendations and discharge records into plain-text
reports and PDF documents. Computed values are rendered verbatim.
"""
