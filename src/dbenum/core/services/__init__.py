"""Services for dbenum."""

from dbenum.core.services.config_loader import (
    ConfigLoadError,
    load_yaml_config,
    mask_sensitive_values,
    read_config_text,
    substitute_env_vars,
)
from dbenum.core.services.generation_service import GenerationService
from dbenum.core.services.loader_service import LoaderService
from dbenum.core.services.mapping_loader import (
    load_mapping,
    parse_mapping,
    parse_text_mapping,
)

__all__ = [
    # Generation service
    "GenerationService",
    # Loader service
    "LoaderService",
    # Mapping loader
    "load_mapping",
    "parse_mapping",
    "parse_text_mapping",
    # Config loader
    "load_yaml_config",
    "read_config_text",
    "substitute_env_vars",
    "mask_sensitive_values",
    "ConfigLoadError",
]
