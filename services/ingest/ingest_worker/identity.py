"""Identity collaborator - generates Data Resource ids."""

import uuid

__all__ = ["UUIDFactory"]


class UUIDFactory:
    """Issues random (version 4) UUIDs as Data Resource ids."""

    def new_id(self) -> str:
        return str(uuid.uuid4())
