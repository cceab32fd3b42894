"""Notification digest service package.

Aggregates recent direct messages, job fair changes and community questions
into a daily summary notification per subscribed user.
"""
