"""
Installers — one per component, registered by name.

The orchestrator never calls an installer directly; it goes through
``InstallerRegistry.run`` which turns every outcome into a receipt.
"""
