"""
Install service — components, recipes and the machinery that applies them.

Layers:
    data/           L0  recipe catalog, profiles, dependency edges
    domain/         L1  pure logic (errors, checksums, progress, resolver)
    detection/      L3  read-only checks of the host
    execution/      L4  side effects (subprocess, downloads, cache, files)
    installers/         recipe-driven installers and their registry
    orchestration/      the run: selection, resolution, state, progress
"""
