from uuid import uuid4


class IDGenerator:
    """Source of unique identifiers for newly persisted entities."""

    def generate_id(self) -> str:
        return str(uuid4())

    def generate_id_with_prefixes(self, prefix1: str, prefix2: str) -> str:
        # "Tapia-Galan-<uuid>", searchable by the surnames prefix
        return f"{prefix1}-{prefix2}-{self.generate_id()}"
