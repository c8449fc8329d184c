"""
Assessment Application Package

Role-based exam administration backend. The package is split into logical
submodules that share one Django app namespace:

- users/: roles and student profiles
- catalog/: courses, classes, question banks, questions and tests
- exam_sessions/: the exam session engine (start, deliver, record, score)

Author: Assessment Backend Team
Version: 1.0.0
"""
