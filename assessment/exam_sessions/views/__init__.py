"""
Exam Session Views Package

Endpoints of the exam session engine.

- Student views: start, fetch question, submit answers, finish
- Admin views: close expired or all open sessions

Author: Assessment Backend Team
Version: 1.0.0
"""

from .student_views import *
from .admin_views import *
