"""
Reminder Engine

Scheduled reminder notifications: queue filling, delivery and user actions.
"""
__version__ = "0.1.0"
