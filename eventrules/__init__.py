"""Scheduling, capacity and join-window rules for EventRules."""
