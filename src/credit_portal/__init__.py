"""College credit tracking portal.

Students mark subjects complete per semester and lock in their progress;
teachers review any student's progress and export a PDF report.
"""

__version__ = "0.1.0"
