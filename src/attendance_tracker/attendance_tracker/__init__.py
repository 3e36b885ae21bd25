"""Attendance Tracker package.

Feature modules (users, attendance, security) expose plain services over
Protocol repositories; a thin Flask layer maps them onto a JSON API.
"""
