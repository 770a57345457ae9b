"""
L3 Detection — read-only checks of the host.

Platform, account, command presence and tool versions.  Nothing here
changes the system.
"""
