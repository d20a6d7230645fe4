"""Dojo Attendance package.

Feature modules (schedules, classes, students, attendance) each carry a
model/repository/service layer and a thin Flask JSON controller.
"""
