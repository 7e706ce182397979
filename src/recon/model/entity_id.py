# SPDX-License-Identifier: MIT

import uuid
from typing import TypeAlias

EntityId: TypeAlias = str

# Length of the id prefix shown on the board; any unique prefix resolves
SHORT_ID_LENGTH = 8


def generate_entity_id() -> EntityId:
    return str(uuid.uuid4())


def short_entity_id(id: EntityId) -> str:
    return id[:SHORT_ID_LENGTH]
