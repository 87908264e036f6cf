"""Cohort Desk: student group assignment and audit backend."""
