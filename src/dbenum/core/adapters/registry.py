"""Registry of database adapters by source type."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ValidationError

from dbenum.core.adapters.base import SourceAdapter
from dbenum.core.adapters.exceptions import AdapterConfigurationError, AdapterNotFoundError


@dataclass
class AdapterInfo:
    """A registered adapter and the schema its configuration must match."""

    source_type: str
    display_name: str
    adapter_class: type[SourceAdapter]
    config_schema: type[BaseModel]

    @property
    def config_fields(self) -> list[str]:
        """Configuration keys accepted in a mapping's ``source`` block."""
        return list(self.config_schema.model_fields)


class AdapterRegistry:
    """Maps the ``type`` of a mapping's source to an adapter class.

    Adapters add themselves with the ``register`` decorator when their module
    is imported:

        @AdapterRegistry.register(
            source_type="sqlite",
            display_name="SQLite file",
            config_schema=SQLiteConfig,
        )
        class SQLiteAdapter(SQLAlchemyAdapter):
            ...

        adapter = AdapterRegistry.get_adapter("sqlite", {"path": "lookups.db"})
    """

    _adapters: dict[str, AdapterInfo] = {}

    @classmethod
    def register(
        cls,
        source_type: str,
        display_name: str,
        config_schema: type[BaseModel],
    ) -> Callable[[type[SourceAdapter]], type[SourceAdapter]]:
        """Decorator registering an adapter class under ``source_type``.

        Args:
            source_type: Name used as ``source.type`` in mapping files.
            display_name: Human-readable name for ``dbenum adapters list``.
            config_schema: Pydantic model the rest of the source block must match.
        """

        def decorator(adapter_class: type[SourceAdapter]) -> type[SourceAdapter]:
            cls._adapters[source_type] = AdapterInfo(
                source_type=source_type,
                display_name=display_name,
                adapter_class=adapter_class,
                config_schema=config_schema,
            )
            return adapter_class

        return decorator

    @classmethod
    def get_adapter(cls, source_type: str, config: dict[str, Any]) -> SourceAdapter:
        """Validate a source configuration and build its (unconnected) adapter.

        Raises:
            AdapterNotFoundError: If source_type is not registered.
            AdapterConfigurationError: If the configuration does not match the
                adapter's schema.
        """
        info = cls.get_adapter_info(source_type)
        try:
            validated_config = info.config_schema.model_validate(config)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in error['loc']) or 'source'}: {error['msg']}"
                for error in e.errors()
            )
            raise AdapterConfigurationError(
                f"Invalid {source_type} configuration: {problems}",
                source_type=source_type,
            ) from e
        return info.adapter_class(validated_config)

    @classmethod
    def get_adapter_info(cls, source_type: str) -> AdapterInfo:
        """Get the registration for a source type.

        Raises:
            AdapterNotFoundError: If source_type is not registered.
        """
        if source_type not in cls._adapters:
            raise AdapterNotFoundError(source_type)
        return cls._adapters[source_type]

    @classmethod
    def list_adapters(cls) -> list[AdapterInfo]:
        return list(cls._adapters.values())

    @classmethod
    def is_registered(cls, source_type: str) -> bool:
        return source_type in cls._adapters

    @classmethod
    def available_types(cls) -> list[str]:
        """Registered source types, in registration order."""
        return list(cls._adapters)
