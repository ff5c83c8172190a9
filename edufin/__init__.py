"""
EduFin - Source Package

Personal finance education for students: saving tips, a need-or-want quiz,
savings goals, an expense tracker and a handful of calculators, served by a
REST API over MongoDB and a Streamlit client.

DESIGN PRINCIPLES:
1. Every record is scoped to its owner
2. Reject bad input at the boundary
3. Money is Decimal, never float
4. Every write is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "EduFin Team"
