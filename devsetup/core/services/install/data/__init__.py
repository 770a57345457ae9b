"""
L0 Data — ``__init__.py`` re-exports all data constants.
"""

from devsetup.core.services.install.data.dependencies import (  # noqa: F401
    DEPENDENCIES,
)
from devsetup.core.services.install.data.profiles import (  # noqa: F401
    PROFILES,
)
from devsetup.core.services.install.data.recipes import (  # noqa: F401
    COMPONENT_RECIPES,
)
