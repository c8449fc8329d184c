"""
Exam Session Package

The exam session engine: starts a student's attempt at a test, hands out
questions one at a time, records each answer exactly once and scores the
attempt when it completes.

Structure:
- models.py: TestSession and Answer
- services/: engine components (store, catalog, sequencer, recorder, lifecycle)
- serializers.py: API serialisation of sessions and engine results
- views/: student and administrator endpoints

Author: Assessment Backend Team
Version: 1.0.0
"""
