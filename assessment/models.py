"""
Assessment Application Models Registry

Central models registry for the assessment app. Imports the models of the
logical submodules (users, catalog, exam_sessions) so they are registered with
Django's ORM under one app label.

Author: Assessment Backend Team
Version: 1.0.0
"""

# Roles and profiles
from .users.models import *

# Courses, classes, banks, questions, tests
from .catalog.models import *

# Sessions and answers
from .exam_sessions.models import *
