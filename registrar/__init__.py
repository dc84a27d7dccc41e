"""
Registrar: a REST API for academic records.

Teachers, courses, students and tests, with referential-integrity checks
and deletion guards, persisted either to flat JSON files or to MongoDB.
"""

__version__ = "1.0.0"
__author__ = "Registrar Development Team"
__description__ = "Academic records REST API with file and MongoDB backends"
