"""
devsetup — developer workstation provisioning for Pop!_OS and Ubuntu.
"""

__version__ = "3.0.0"
