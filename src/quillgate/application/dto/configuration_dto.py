"""Configuration governance DTOs."""

from dataclasses import dataclass

from quillgate.domain.value_objects import Criticality


@dataclass
class CreateConfigurationInput:
    """Input for creating a configuration key."""

    section: str
    key: str
    value: str | None
    data_type: str = "string"
    description: str | None = None
    criticality: Criticality = Criticality.LOW
    requires_approval: bool = False
    is_read_only: bool = False
