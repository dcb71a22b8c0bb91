"""
Base contract model.

Defines the common pydantic configuration shared by every data contract:
snake_case attributes in Python, camelCase keys on the wire.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ContractModel(BaseModel):
    """
    Base model for all tripdocs contracts.

    Fields are declared in snake_case and serialized with camelCase aliases
    (``depart_airport`` <-> ``departAirport``) so that extractor output and
    API payloads keep the document-extraction key style. Both spellings are
    accepted on input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_wire(self) -> dict:
        """Dump to a JSON-compatible dict with camelCase keys, omitting unset optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
