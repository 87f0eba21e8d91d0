"""Match domain services: clock, penalties and the state aggregate.

This package holds the clock engine that Socket.IO handlers and HTTP routes
call into, keeping transport concerns out of the timekeeping logic.
"""
